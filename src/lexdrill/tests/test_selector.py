"""Tests for the adaptive selector."""
import random
from collections import Counter
from unittest.mock import Mock

import pytest

from lexdrill.models.vocabulary_models import AttemptRecord, LearnableItem
from lexdrill.services.catalog import LessonCatalog
from lexdrill.services.ledger import StatsLedger
from lexdrill.services.selector import AdaptiveSelector


@pytest.fixture
def selector() -> AdaptiveSelector:
    """Selector with a seeded random source and default weights."""
    return AdaptiveSelector(rng=random.Random(1234), unseen_weight=200, min_weight=1)


@pytest.fixture
def items(catalog: LessonCatalog) -> list[LearnableItem]:
    return catalog.items_for_lesson(1)


def test_pick_empty_returns_none(selector: AdaptiveSelector, ledger: StatsLedger) -> None:
    """Test that no candidates means no item."""
    assert selector.pick([], ledger) is None


def test_pick_single_candidate(selector: AdaptiveSelector, items: list[LearnableItem], ledger: StatsLedger) -> None:
    """Test that a lone candidate is always returned, whatever its weight."""
    only = items[0]
    for _ in range(10):
        ledger.record_correct(only.key)

    assert all(selector.pick([only], ledger) == only for _ in range(50))


@pytest.mark.parametrize(
    "record,expected",
    [
        (AttemptRecord(), 200),
        (AttemptRecord(correct=10, incorrect=0, total=10), 1),
        (AttemptRecord(correct=0, incorrect=4, total=4), 101),
        (AttemptRecord(correct=3, incorrect=1, total=4), 26),
    ],
)
def test_item_weight(selector: AdaptiveSelector, record: AttemptRecord, expected: float) -> None:
    """Test the weight formula for unseen, perfect, failed and mixed records."""
    assert selector.item_weight(record) == pytest.approx(expected)


def test_unseen_item_dominates(selector: AdaptiveSelector, items: list[LearnableItem], ledger: StatsLedger) -> None:
    """Test that an unseen item beats a mastered one over many draws."""
    unseen, mastered = items[0], items[1]
    for _ in range(10):
        ledger.record_correct(mastered.key)

    draws = Counter(selector.pick([unseen, mastered], ledger) for _ in range(10_000))

    assert draws[unseen] / 10_000 > 0.95
    # floor weight keeps mastered items in rotation
    assert draws[mastered] > 0


def test_missed_items_drawn_more_often(
    selector: AdaptiveSelector, items: list[LearnableItem], ledger: StatsLedger
) -> None:
    """Test that a fully wrong item is drawn more often than a perfect one."""
    wrong, right = items[0], items[1]
    ledger.record_incorrect(wrong.key)
    ledger.record_correct(right.key)

    draws = Counter(selector.pick([wrong, right], ledger) for _ in range(5_000))

    # expected share 101/102
    assert draws[wrong] / 5_000 > 0.95


def test_cumulative_draw_walks_in_order(items: list[LearnableItem], ledger: StatsLedger) -> None:
    """Test which candidate each point of the wheel lands on."""
    first, second = items[0], items[1]
    ledger.record_incorrect(second.key)  # weight 101 against 200

    def pick_at(fraction: float) -> LearnableItem:
        selector = AdaptiveSelector(rng=Mock(random=Mock(return_value=fraction)), unseen_weight=200, min_weight=1)
        return selector.pick([first, second], ledger)

    assert pick_at(0.0) == first
    assert pick_at(0.6) == first
    assert pick_at(0.7) == second
    assert pick_at(0.999) == second


def test_overrun_falls_back_to_first(items: list[LearnableItem], ledger: StatsLedger) -> None:
    """Test the fallback when the draw lands past the accumulated weight."""
    selector = AdaptiveSelector(rng=Mock(random=Mock(return_value=1.5)))

    assert selector.pick(items[:3], ledger) == items[0]


def test_pick_uses_only_candidates(selector: AdaptiveSelector, items: list[LearnableItem], ledger: StatsLedger) -> None:
    """Test that every draw comes from the candidate list."""
    candidates = items[:3]
    assert all(selector.pick(candidates, ledger) in candidates for _ in range(200))
