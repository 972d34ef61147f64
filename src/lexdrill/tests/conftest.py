"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Callable

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("STATE_DIR", tempfile.mkdtemp(prefix="lexdrill-test-"))

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from lexdrill.config import ensure_directories
from lexdrill.models.vocabulary_models import Direction, Lesson, VocabularyEntry
from lexdrill.services.catalog import LessonCatalog
from lexdrill.services.ledger import StatsLedger

fake = Faker()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield
    fake.unique.clear()


def make_catalog(groups: int = 3, words_per_group: int = 5, categories=("noun", "verb")) -> LessonCatalog:
    """Build a two-track catalog: lessons 1..groups forward, then the same groups reversed."""
    entries = []
    for group in range(1, groups + 1):
        for position in range(words_per_group):
            target = fake.unique.word()
            entries.append(
                VocabularyEntry(
                    text_id=target,
                    source_text=f"{target}-es",
                    target_text=target,
                    category=categories[position % len(categories)],
                    lesson_group=group,
                )
            )

    lessons = []
    for track, direction in enumerate((Direction.FORWARD, Direction.REVERSE)):
        for group in range(1, groups + 1):
            lessons.append(
                Lesson(
                    id=track * groups + group,
                    name=fake.sentence(nb_words=2),
                    description=fake.sentence(),
                    direction=direction,
                    vocabulary_group=group,
                )
            )
    return LessonCatalog(entries, lessons)


@pytest.fixture
def catalog_factory() -> Callable[..., LessonCatalog]:
    return make_catalog


@pytest.fixture
def catalog() -> LessonCatalog:
    """Three groups of five words, lessons 1-3 forward and 4-6 reverse."""
    return make_catalog()


@pytest.fixture
def ledger() -> StatsLedger:
    return StatsLedger()


@pytest.fixture
def mark_learned() -> Callable[..., None]:
    """Answer every given item correctly ``times`` times."""

    def _mark(ledger: StatsLedger, items, times: int = 1) -> None:
        for item in items:
            for _ in range(times):
                ledger.record_correct(item.key)

    return _mark
