"""Adaptive weighted-random selection of the next drill item."""
import logging
import random
from typing import List, Optional, Sequence, Tuple

from lexdrill.config import settings
from lexdrill.models.vocabulary_models import AttemptRecord, LearnableItem
from lexdrill.services.ledger import StatsLedger

logger = logging.getLogger(__name__)


class AdaptiveSelector:
    """Picks drill items, favouring unseen and frequently missed ones.

    Unseen items get ``unseen_weight`` (200 by default). Attempted items get
    ``incorrect / total * 100 + min_weight``, so a perfect record still has
    weight 1 and a fully wrong one has 101. The draw itself is a roulette
    wheel over the candidate list.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        unseen_weight: Optional[float] = None,
        min_weight: Optional[float] = None,
    ):
        self.rng = rng or random.Random()
        self.unseen_weight = settings.learning.unseen_item_weight if unseen_weight is None else unseen_weight
        self.min_weight = settings.learning.min_item_weight if min_weight is None else min_weight

    def item_weight(self, record: AttemptRecord) -> float:
        """Weight of one item given its attempt record."""
        if record.total == 0:
            return self.unseen_weight
        return (record.incorrect / record.total) * 100 + self.min_weight

    def weights(self, candidates: Sequence[LearnableItem], ledger: StatsLedger) -> List[Tuple[LearnableItem, float]]:
        return [(item, self.item_weight(ledger.get(item.key))) for item in candidates]

    def pick(self, candidates: Sequence[LearnableItem], ledger: StatsLedger) -> Optional[LearnableItem]:
        """Draw the next item, None when there are no candidates."""
        if not candidates:
            return None

        weighted = self.weights(candidates, ledger)
        total_weight = sum(weight for _, weight in weighted)
        target = self.rng.random() * total_weight

        running = 0.0
        for item, weight in weighted:
            running += weight
            if running >= target:
                return item

        # Only reachable through floating point overrun
        logger.warning(f"Weighted draw overran {total_weight} with target {target}, using first candidate")
        return candidates[0]
