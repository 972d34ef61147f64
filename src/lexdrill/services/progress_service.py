"""Progress evaluation over the stats ledger."""
import logging
from typing import Iterable, List, Optional

from lexdrill.models.vocabulary_models import (
    ItemReport,
    LearnableItem,
    LessonProgress,
    OverallStats,
    round_half_up,
)
from lexdrill.services.catalog import LessonCatalog, LessonRef
from lexdrill.services.ledger import StatsLedger

logger = logging.getLogger(__name__)


class ProgressService:
    """Service computing lesson mastery and ledger summaries."""

    def __init__(self, catalog: LessonCatalog):
        """Initialize the service with the lesson catalog."""
        self.catalog = catalog

    def lesson_progress(self, lesson: LessonRef, ledger: StatsLedger) -> LessonProgress:
        """Classify every item of a lesson as learned, learning or new.

        An item is new when it has no attempts, learned when its correct
        answers outnumber its incorrect ones, and learning otherwise.
        Unknown lessons and lessons without items report 0%.
        """
        if self.catalog.get_lesson(lesson) is None:
            logger.debug(f"Progress requested for unknown lesson {lesson}")
            return LessonProgress()
        return self.items_progress(self.catalog.items_for_lesson(lesson), ledger)

    def items_progress(self, items: Iterable[LearnableItem], ledger: StatsLedger) -> LessonProgress:
        learned = learning = new = 0
        for item in items:
            record = ledger.get(item.key)
            if record.total == 0:
                new += 1
            elif record.correct > record.incorrect:
                learned += 1
            else:
                learning += 1

        item_count = learned + learning + new
        mastered_percent = round_half_up(100 * learned / item_count) if item_count else 0
        return LessonProgress(
            learned_count=learned,
            learning_count=learning,
            new_count=new,
            mastered_percent=mastered_percent,
        )

    def overall_stats(self, ledger: StatsLedger) -> OverallStats:
        """Summarize attempts across the whole ledger."""
        total_attempts = 0
        total_correct = 0
        items_played = 0
        for _, record in ledger.items():
            total_attempts += record.total
            total_correct += record.correct
            items_played += 1

        success_rate = round_half_up(100 * total_correct / total_attempts) if total_attempts else 0
        return OverallStats(
            total_attempts=total_attempts,
            total_correct=total_correct,
            items_played=items_played,
            success_rate=success_rate,
        )

    def item_report(
        self,
        ledger: StatsLedger,
        categories: Optional[Iterable[str]] = None,
    ) -> List[ItemReport]:
        """Per-item records, lowest success rate first and unattempted items last."""
        wanted = set(categories) if categories is not None else None
        rows = []
        for lesson in self.catalog.lessons:
            for item in self.catalog.items_for_lesson(lesson):
                if wanted is not None and item.entry.category not in wanted:
                    continue
                rows.append(ItemReport(item=item, record=ledger.get(item.key)))

        # Ties keep catalog order
        return sorted(
            rows,
            key=lambda row: (row.success_rate is None, row.success_rate or 0),
        )
