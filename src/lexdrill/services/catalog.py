"""Lesson catalog loaded from the vocabulary and lesson data files.

The catalog is fixed configuration: it is built once at startup from two
JSON files and never mutated afterwards. Lessons are kept in file order;
the lessons sharing a direction form a track, and tracks are ordered by the
first appearance of their direction in the file.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from lexdrill.config import settings
from lexdrill.models.vocabulary_models import (
    Direction,
    LearnableItem,
    Lesson,
    VocabularyEntry,
)

logger = logging.getLogger(__name__)

LessonRef = Union[Lesson, int]


class LessonCatalog:
    """Ordered lessons and the vocabulary they drill."""

    def __init__(self, entries: Iterable[VocabularyEntry], lessons: Iterable[Lesson]):
        self.entries: Tuple[VocabularyEntry, ...] = tuple(entries)
        self.lessons: Tuple[Lesson, ...] = tuple(lessons)

        text_ids = [entry.text_id for entry in self.entries]
        if len(set(text_ids)) != len(text_ids):
            raise ValueError("Vocabulary entries must have unique text ids")
        lesson_ids = [lesson.id for lesson in self.lessons]
        if len(set(lesson_ids)) != len(lesson_ids):
            raise ValueError("Lesson ids must be unique")

        self._lessons_by_id: Dict[int, Lesson] = {lesson.id: lesson for lesson in self.lessons}
        self._groups: Dict[int, List[VocabularyEntry]] = {}
        for entry in self.entries:
            self._groups.setdefault(entry.lesson_group, []).append(entry)
        self._tracks: Dict[Direction, List[Lesson]] = {}
        for lesson in self.lessons:
            self._tracks.setdefault(lesson.direction, []).append(lesson)

    @classmethod
    def from_files(
        cls,
        vocabulary_file: Optional[Path] = None,
        lessons_file: Optional[Path] = None,
    ) -> "LessonCatalog":
        """Load the catalog from the configured JSON data files."""
        vocabulary_file = Path(vocabulary_file or settings.paths.vocabulary_file)
        lessons_file = Path(lessons_file or settings.paths.lessons_file)
        try:
            entries = load_vocabulary(vocabulary_file)
            lessons = load_lessons(lessons_file)
            catalog = cls(entries, lessons)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error loading lesson catalog: {e}")
            raise
        logger.info(f"Loaded {len(catalog.entries)} vocabulary entries and {len(catalog.lessons)} lessons")
        return catalog

    def get_lesson(self, lesson: LessonRef) -> Optional[Lesson]:
        """Get a lesson by id, None when the id is not in the catalog."""
        lesson_id = lesson.id if isinstance(lesson, Lesson) else lesson
        return self._lessons_by_id.get(lesson_id)

    def tracks(self) -> List[Direction]:
        """Directions in track order."""
        return list(self._tracks)

    def track(self, direction: Direction) -> List[Lesson]:
        """Lessons of one direction, in catalog order."""
        return list(self._tracks.get(direction, []))

    def entries_for_group(self, group: int) -> List[VocabularyEntry]:
        return list(self._groups.get(group, []))

    def items_for_lesson(self, lesson: LessonRef) -> List[LearnableItem]:
        """Learnable items of a lesson: its vocabulary group in its direction."""
        found = self.get_lesson(lesson)
        if found is None:
            return []
        return [LearnableItem(entry, found.direction) for entry in self.entries_for_group(found.vocabulary_group)]

    def previous_in_track(self, lesson: LessonRef) -> Optional[Lesson]:
        """The lesson before this one in its own track, None for a track opener."""
        found = self.get_lesson(lesson)
        if found is None:
            return None
        track = self._tracks[found.direction]
        position = track.index(found)
        return track[position - 1] if position > 0 else None

    def previous_track(self, direction: Direction) -> Optional[Direction]:
        """The track ordered before the given one, if any."""
        order = self.tracks()
        if direction not in order:
            return None
        position = order.index(direction)
        return order[position - 1] if position > 0 else None

    def categories(self) -> List[str]:
        """Distinct vocabulary categories in first-seen order."""
        seen: Dict[str, None] = {}
        for entry in self.entries:
            seen.setdefault(entry.category, None)
        return list(seen)


def _read_json(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_vocabulary(path: Path) -> List[VocabularyEntry]:
    """Load vocabulary entries from a JSON file.

    Each entry needs ``source``, ``target``, ``category`` and ``group``;
    ``id`` defaults to the target text.
    """
    data = _read_json(path)
    raw_entries: Sequence[dict] = data.get("vocabulary", [])
    if not raw_entries:
        raise ValueError(f"No vocabulary entries found in {path}")

    return [
        VocabularyEntry(
            text_id=str(raw.get("id") or raw["target"]),
            source_text=raw["source"],
            target_text=raw["target"],
            category=raw.get("category", "phrase"),
            lesson_group=int(raw["group"]),
        )
        for raw in raw_entries
    ]


def load_lessons(path: Path) -> List[Lesson]:
    """Load the ordered lesson list from a JSON file."""
    data = _read_json(path)
    raw_lessons: Sequence[dict] = data.get("lessons", [])
    if not raw_lessons:
        raise ValueError(f"No lessons found in {path}")

    return [
        Lesson(
            id=int(raw["id"]),
            name=raw["name"],
            description=raw.get("description", ""),
            direction=Direction(raw["direction"]),
            vocabulary_group=int(raw["group"]),
        )
        for raw in raw_lessons
    ]
