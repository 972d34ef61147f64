"""Models for vocabulary, lessons and attempt statistics."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


STAT_KEY_SEPARATOR = "|"
LANGUAGE_NAMES = {"es": "Spanish", "en": "English"}


class Direction(Enum):
    """Translation direction of a drill item."""
    FORWARD = "es-en"  # Source language shown, target language expected
    REVERSE = "en-es"  # Target language shown, source language expected

    @property
    def answer_language(self) -> str:
        return LANGUAGE_NAMES[self.value.split("-")[1]]


@dataclass(frozen=True)
class VocabularyEntry:
    """Immutable source/target word pair."""
    text_id: str  # Stable identifier, independent of list position
    source_text: str
    target_text: str
    category: str
    lesson_group: int


@dataclass(frozen=True)
class ItemKey:
    """Identity of a learnable item in the stats ledger."""
    text_id: str
    direction: Direction

    def to_storage_key(self) -> str:
        """Serialize as "<text_id>|<direction>"."""
        return f"{self.text_id}{STAT_KEY_SEPARATOR}{self.direction.value}"

    @classmethod
    def from_storage_key(cls, raw: str) -> "ItemKey":
        """Parse a key produced by to_storage_key.

        Raises ValueError when the direction suffix is missing or unknown;
        legacy keys must be migrated before parsing.
        """
        text_id, separator, direction = raw.rpartition(STAT_KEY_SEPARATOR)
        if not separator or not text_id:
            raise ValueError(f"Stat key {raw!r} has no direction suffix")
        return cls(text_id, Direction(direction))


@dataclass(frozen=True)
class LearnableItem:
    """A vocabulary entry bound to one translation direction."""
    entry: VocabularyEntry
    direction: Direction

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.entry.text_id, self.direction)

    @property
    def prompt(self) -> str:
        """Text shown to the learner."""
        if self.direction is Direction.FORWARD:
            return self.entry.source_text
        return self.entry.target_text

    @property
    def answer(self) -> str:
        """Text the learner is expected to produce."""
        if self.direction is Direction.FORWARD:
            return self.entry.target_text
        return self.entry.source_text


@dataclass(frozen=True)
class AttemptRecord:
    """Attempt counts for one learnable item."""
    correct: int = 0
    incorrect: int = 0
    total: int = 0

    @property
    def success_rate(self) -> Optional[int]:
        """Rounded percentage of correct answers, None when never attempted."""
        if self.total == 0:
            return None
        return round_half_up(100 * self.correct / self.total)

    def to_dict(self) -> dict:
        return {"correct": self.correct, "incorrect": self.incorrect, "total": self.total}


@dataclass(frozen=True)
class Lesson:
    """A lesson drilling one vocabulary group in one direction."""
    id: int
    name: str
    description: str
    direction: Direction
    vocabulary_group: int


@dataclass(frozen=True)
class LessonProgress:
    """Classification counts for the items of a lesson."""
    learned_count: int = 0
    learning_count: int = 0
    new_count: int = 0
    mastered_percent: int = 0

    @property
    def item_count(self) -> int:
        return self.learned_count + self.learning_count + self.new_count


@dataclass(frozen=True)
class OverallStats:
    """Summary over every record in the ledger."""
    total_attempts: int
    total_correct: int
    items_played: int
    success_rate: int


@dataclass(frozen=True)
class ItemReport:
    """One row of the per-item progress report."""
    item: LearnableItem
    record: AttemptRecord

    @property
    def success_rate(self) -> Optional[int]:
        return self.record.success_rate


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative input."""
    return int(value + 0.5)
