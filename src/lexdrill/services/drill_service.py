"""Drill service wiring the ledger, gate and selector for a front end."""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from lexdrill.models.vocabulary_models import LearnableItem, Lesson, LessonProgress
from lexdrill.monitoring import answers_recorded, items_picked, ledger_resets, lesson_rejections
from lexdrill.services.catalog import LessonCatalog
from lexdrill.services.ledger import StatsLedger
from lexdrill.services.ledger_store import LedgerStore
from lexdrill.services.progress_service import ProgressService
from lexdrill.services.selector import AdaptiveSelector
from lexdrill.services.unlock_gate import GateDecision, UnlockGate

logger = logging.getLogger(__name__)

LockedNotifier = Callable[[GateDecision], None]


class LessonLockedError(Exception):
    """Raised when a drill is requested for a lesson the gate keeps closed."""

    def __init__(self, decision: GateDecision):
        super().__init__(
            f"Lesson {decision.lesson_id} is locked"
            + (f" until lesson {decision.blocking_lesson_id} is mastered" if decision.blocking_lesson_id else "")
        )
        self.decision = decision


@dataclass(frozen=True)
class LessonOverview:
    """A lesson with its progress and gate state, for lesson lists."""
    lesson: Lesson
    progress: LessonProgress
    decision: GateDecision

    @property
    def unlocked(self) -> bool:
        return self.decision.unlocked


class DrillSession:
    """One drill run: draws items and records answers.

    The candidate list is rebuilt before every draw, so lessons unlocked
    by an answer feed practice sessions straight away.
    """

    def __init__(
        self,
        service: "DrillService",
        mode: str,
        candidates: Callable[[], List[LearnableItem]],
        record_stats: bool = True,
        lesson: Optional[Lesson] = None,
    ):
        self.service = service
        self.mode = mode
        self.lesson = lesson
        self.record_stats = record_stats
        self._candidates = candidates
        self.current: Optional[LearnableItem] = None

    def candidates(self) -> List[LearnableItem]:
        return self._candidates()

    def next_item(self) -> Optional[LearnableItem]:
        """Draw the next item; None means nothing is available to drill."""
        self.current = self.service.selector.pick(self.candidates(), self.service.ledger)
        if self.current is None:
            logger.info(f"No items available for {self.mode} drill")
        else:
            items_picked.labels(mode=self.mode).inc()
        return self.current

    def answer(self, correct: bool) -> None:
        """Record the learner's verdict on the current item."""
        if self.current is None:
            raise ValueError("No item has been drawn in this session")
        if self.record_stats:
            self.service.record_answer(self.current, correct)
        else:
            logger.debug(f"Answer for {self.current.key.to_storage_key()} not recorded in {self.mode} mode")

    def progress(self) -> LessonProgress:
        """Progress over this session's current candidates."""
        return self.service.progress_service.items_progress(self.candidates(), self.service.ledger)


class DrillService:
    """Service exposing the drill loop to a front end."""

    def __init__(
        self,
        catalog: LessonCatalog,
        ledger: StatsLedger,
        store: Optional[LedgerStore] = None,
        selector: Optional[AdaptiveSelector] = None,
        gate: Optional[UnlockGate] = None,
        notify_locked: Optional[LockedNotifier] = None,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.store = store
        self.progress_service = ProgressService(catalog)
        self.selector = selector or AdaptiveSelector()
        self.gate = gate or UnlockGate(catalog, self.progress_service)
        self.notify_locked = notify_locked

    def lesson_overview(self) -> List[LessonOverview]:
        """All lessons with progress and gate state, in catalog order."""
        return [
            LessonOverview(
                lesson=lesson,
                progress=self.progress_service.lesson_progress(lesson, self.ledger),
                decision=self.gate.check(lesson, self.ledger),
            )
            for lesson in self.catalog.lessons
        ]

    def start_lesson(self, lesson_id: int) -> DrillSession:
        """Open a drill over one lesson.

        Raises:
            ValueError: the lesson id is not in the catalog.
            LessonLockedError: the gate keeps the lesson closed; the locked
                notifier has already been called.
        """
        lesson = self.catalog.get_lesson(lesson_id)
        if lesson is None:
            raise ValueError(f"Lesson {lesson_id} not found")

        decision = self.gate.check(lesson, self.ledger)
        if not decision.unlocked:
            lesson_rejections.inc()
            logger.info(f"Rejected entry to lesson {lesson_id}, blocked by lesson {decision.blocking_lesson_id}")
            if self.notify_locked is not None:
                self.notify_locked(decision)
            raise LessonLockedError(decision)

        logger.info(f"Starting drill for lesson {lesson.id} ({lesson.name}, {lesson.direction.value})")
        return DrillSession(
            self,
            mode="lesson",
            candidates=lambda: self.catalog.items_for_lesson(lesson),
            record_stats=True,
            lesson=lesson,
        )

    def start_practice(
        self,
        categories: Optional[Iterable[str]] = None,
        record_stats: bool = False,
    ) -> DrillSession:
        """Open a practice drill over every unlocked lesson.

        Practice answers are not recorded unless ``record_stats`` is set.
        """
        wanted = set(categories) if categories is not None else None
        logger.info(f"Starting practice drill (categories: {sorted(wanted) if wanted else 'all'})")
        return DrillSession(
            self,
            mode="practice",
            candidates=lambda: self.practice_items(wanted),
            record_stats=record_stats,
        )

    def practice_items(self, categories: Optional[Iterable[str]] = None) -> List[LearnableItem]:
        """Items of all unlocked lessons, optionally limited to some categories."""
        wanted = set(categories) if categories is not None else None
        items = []
        for lesson in self.gate.unlocked_lessons(self.ledger):
            for item in self.catalog.items_for_lesson(lesson):
                if wanted is None or item.entry.category in wanted:
                    items.append(item)
        return items

    def record_answer(self, item: LearnableItem, correct: bool) -> None:
        """Record one answer and persist the ledger."""
        if correct:
            self.ledger.record_correct(item.key)
        else:
            self.ledger.record_incorrect(item.key)
        answers_recorded.labels(outcome="correct" if correct else "incorrect").inc()
        self._save()

    def reset_stats(self) -> None:
        """Wipe the ledger and persist the empty snapshot."""
        self.ledger.reset_all()
        ledger_resets.inc()
        self._save()

    def _save(self) -> None:
        """Persist the ledger, keeping the drill alive when the store fails.

        Every save writes the full snapshot, so counts kept in memory after a
        failed save reach the store with the next successful one.
        """
        if self.store is None:
            return
        try:
            self.store.save(self.ledger)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Could not save ledger to {self.store.backend} store, keeping changes in memory: {e}")
