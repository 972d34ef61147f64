"""Tests for the lesson unlock gate."""
import pytest

from lexdrill.services.catalog import LessonCatalog
from lexdrill.services.ledger import StatsLedger
from lexdrill.services.unlock_gate import GateDecision, UnlockGate, unlock_message


@pytest.fixture
def gate(catalog: LessonCatalog) -> UnlockGate:
    """Gate with the cross-track seam and the 80% threshold."""
    return UnlockGate(catalog, threshold=80, cross_track_unlock=True)


@pytest.fixture
def independent_gate(catalog: LessonCatalog) -> UnlockGate:
    """Gate treating every track independently."""
    return UnlockGate(catalog, threshold=80, cross_track_unlock=False)


def test_first_lesson_unlocked_on_empty_ledger(gate: UnlockGate, ledger: StatsLedger) -> None:
    """Test that lesson 1 never depends on anything."""
    assert gate.is_unlocked(1, ledger) is True
    assert gate.prerequisite(1) is None


def test_track_openers_unlocked_without_seam(independent_gate: UnlockGate, ledger: StatsLedger) -> None:
    """Test that lesson 1 of each track is open when tracks are independent."""
    assert independent_gate.is_unlocked(1, ledger) is True
    assert independent_gate.is_unlocked(4, ledger) is True
    assert independent_gate.is_unlocked(2, ledger) is False
    assert independent_gate.is_unlocked(5, ledger) is False


def test_second_lesson_threshold_is_inclusive(
    gate: UnlockGate, catalog: LessonCatalog, ledger: StatsLedger, mark_learned
) -> None:
    """Test that lesson 2 opens at exactly 80% of lesson 1."""
    items = catalog.items_for_lesson(1)

    mark_learned(ledger, items[:3])
    assert gate.is_unlocked(2, ledger) is False
    assert gate.blocking_lesson(2, ledger) == 1

    mark_learned(ledger, items[3:4])
    assert gate.is_unlocked(2, ledger) is True
    assert gate.blocking_lesson(2, ledger) is None


def test_learning_items_do_not_count(gate: UnlockGate, catalog: LessonCatalog, ledger: StatsLedger) -> None:
    """Test that attempted but not learned items keep the next lesson locked."""
    for item in catalog.items_for_lesson(1):
        ledger.record_correct(item.key)
        ledger.record_incorrect(item.key)

    assert gate.is_unlocked(2, ledger) is False


def test_chain_within_track(gate: UnlockGate, catalog: LessonCatalog, ledger: StatsLedger, mark_learned) -> None:
    """Test that lesson 3 needs lesson 2, not lesson 1."""
    mark_learned(ledger, catalog.items_for_lesson(1))
    assert gate.is_unlocked(3, ledger) is False

    mark_learned(ledger, catalog.items_for_lesson(2))
    assert gate.is_unlocked(3, ledger) is True


def test_cross_track_seam(gate: UnlockGate, catalog: LessonCatalog, ledger: StatsLedger, mark_learned) -> None:
    """Test that the reverse track opens on mastery of the last forward lesson."""
    assert gate.prerequisite(4).id == 3
    assert gate.check(4, ledger) == GateDecision(lesson_id=4, unlocked=False, blocking_lesson_id=3)

    mark_learned(ledger, catalog.items_for_lesson(3))

    assert gate.is_unlocked(4, ledger) is True
    assert gate.is_unlocked(5, ledger) is False


def test_unknown_lesson_is_locked(gate: UnlockGate, ledger: StatsLedger) -> None:
    """Test that ids outside the catalog are locked without error."""
    assert gate.is_unlocked(0, ledger) is False
    assert gate.is_unlocked(999, ledger) is False
    assert gate.check(999, ledger) == GateDecision(lesson_id=999, unlocked=False, blocking_lesson_id=None)


def test_reset_relocks(gate: UnlockGate, catalog: LessonCatalog, ledger: StatsLedger, mark_learned) -> None:
    """Test that unlock state follows a ledger reset immediately."""
    for lesson_id in (1, 2, 3):
        mark_learned(ledger, catalog.items_for_lesson(lesson_id))
    assert [lesson.id for lesson in gate.unlocked_lessons(ledger)] == [1, 2, 3, 4]

    ledger.reset_all()

    assert [lesson.id for lesson in gate.unlocked_lessons(ledger)] == [1]


def test_custom_threshold(catalog: LessonCatalog, ledger: StatsLedger, mark_learned) -> None:
    """Test a gate with a lower threshold."""
    gate = UnlockGate(catalog, threshold=40)
    mark_learned(ledger, catalog.items_for_lesson(1)[:2])

    assert gate.is_unlocked(2, ledger) is True


def test_unlock_message() -> None:
    """Test the locked notification text."""
    assert (
        unlock_message(GateDecision(lesson_id=10, unlocked=False, blocking_lesson_id=9), threshold=80)
        == "Complete 80% of Lesson 9 first to unlock this lesson."
    )
    assert unlock_message(GateDecision(lesson_id=99, unlocked=False)) == "Lesson 99 is not available."
