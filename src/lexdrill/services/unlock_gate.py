"""Lesson unlock gate derived from lesson mastery."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from lexdrill.config import settings
from lexdrill.models.vocabulary_models import Lesson
from lexdrill.services.catalog import LessonCatalog, LessonRef
from lexdrill.services.ledger import StatsLedger
from lexdrill.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    """Result of asking the gate about one lesson."""
    lesson_id: int
    unlocked: bool
    blocking_lesson_id: Optional[int] = None


class UnlockGate:
    """Decides which lessons are accessible.

    Nothing is cached: every answer is recomputed from the ledger, so a
    reset or a new answer is reflected immediately.
    """

    def __init__(
        self,
        catalog: LessonCatalog,
        progress_service: Optional[ProgressService] = None,
        threshold: Optional[int] = None,
        cross_track_unlock: Optional[bool] = None,
    ):
        self.catalog = catalog
        self.progress_service = progress_service or ProgressService(catalog)
        self.threshold = settings.learning.unlock_threshold if threshold is None else threshold
        self.cross_track_unlock = (
            settings.learning.cross_track_unlock if cross_track_unlock is None else cross_track_unlock
        )

    def prerequisite(self, lesson: LessonRef) -> Optional[Lesson]:
        """The lesson whose mastery opens this one, None when it has no dependency."""
        found = self.catalog.get_lesson(lesson)
        if found is None:
            return None
        previous = self.catalog.previous_in_track(found)
        if previous is not None or not self.cross_track_unlock:
            return previous

        # Track opener: depends on the last lesson of the preceding track
        previous_direction = self.catalog.previous_track(found.direction)
        if previous_direction is None:
            return None
        previous_track = self.catalog.track(previous_direction)
        return previous_track[-1] if previous_track else None

    def blocking_lesson(self, lesson: LessonRef, ledger: StatsLedger) -> Optional[int]:
        """Id of the lesson whose threshold is unmet, None when nothing blocks."""
        prerequisite = self.prerequisite(lesson)
        if prerequisite is None:
            return None
        progress = self.progress_service.lesson_progress(prerequisite, ledger)
        if progress.mastered_percent >= self.threshold:
            return None
        return prerequisite.id

    def check(self, lesson: LessonRef, ledger: StatsLedger) -> GateDecision:
        """Full gate decision for a lesson; unknown lessons are locked."""
        lesson_id = lesson.id if isinstance(lesson, Lesson) else lesson
        if self.catalog.get_lesson(lesson_id) is None:
            return GateDecision(lesson_id=lesson_id, unlocked=False)
        blocking = self.blocking_lesson(lesson_id, ledger)
        return GateDecision(lesson_id=lesson_id, unlocked=blocking is None, blocking_lesson_id=blocking)

    def is_unlocked(self, lesson: LessonRef, ledger: StatsLedger) -> bool:
        return self.check(lesson, ledger).unlocked

    def unlocked_lessons(self, ledger: StatsLedger) -> List[Lesson]:
        """Every lesson currently open, in catalog order."""
        return [lesson for lesson in self.catalog.lessons if self.is_unlocked(lesson, ledger)]


def unlock_message(decision: GateDecision, threshold: Optional[int] = None) -> str:
    """Text for the "lesson locked" notification."""
    threshold = settings.learning.unlock_threshold if threshold is None else threshold
    if decision.blocking_lesson_id is None:
        return f"Lesson {decision.lesson_id} is not available."
    return f"Complete {threshold}% of Lesson {decision.blocking_lesson_id} first to unlock this lesson."
