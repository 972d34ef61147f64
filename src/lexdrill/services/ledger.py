"""Stats ledger holding attempt counts per learnable item."""
import logging
from typing import Dict, Iterator, Mapping, Tuple

from lexdrill.models.vocabulary_models import AttemptRecord, ItemKey

logger = logging.getLogger(__name__)

EMPTY_RECORD = AttemptRecord()


class StatsLedger:
    """In-memory mapping from item identity to attempt counts.

    The ledger is the only writer of its records: counts change through
    record_correct, record_incorrect and reset_all, or through from_dict
    when a saved snapshot is loaded. Every path keeps
    ``total == correct + incorrect`` for every record.
    """

    def __init__(self):
        self._records: Dict[ItemKey, AttemptRecord] = {}

    def get(self, key: ItemKey) -> AttemptRecord:
        """Get the record for an item, zeros when it was never answered."""
        return self._records.get(key, EMPTY_RECORD)

    def record_correct(self, key: ItemKey) -> AttemptRecord:
        """Count one correct answer for an item."""
        current = self.get(key)
        record = AttemptRecord(
            correct=current.correct + 1,
            incorrect=current.incorrect,
            total=current.total + 1,
        )
        self._records[key] = record
        logger.debug(f"Recorded correct answer for {key.to_storage_key()}: {record}")
        return record

    def record_incorrect(self, key: ItemKey) -> AttemptRecord:
        """Count one incorrect answer for an item."""
        current = self.get(key)
        record = AttemptRecord(
            correct=current.correct,
            incorrect=current.incorrect + 1,
            total=current.total + 1,
        )
        self._records[key] = record
        logger.debug(f"Recorded incorrect answer for {key.to_storage_key()}: {record}")
        return record

    def reset_all(self) -> None:
        """Clear every record."""
        count = len(self._records)
        self._records.clear()
        logger.info(f"Stats ledger reset, {count} records cleared")

    def items(self) -> Iterator[Tuple[ItemKey, AttemptRecord]]:
        return iter(list(self._records.items()))

    def __contains__(self, key: ItemKey) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """Serialize as ``{"<text_id>|<direction>": {correct, incorrect, total}}``."""
        return {key.to_storage_key(): record.to_dict() for key, record in self._records.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, int]]) -> "StatsLedger":
        """Rebuild a ledger from to_dict output.

        Keys must already carry a direction suffix (see migrate_legacy_keys).
        Unparseable or negative entries are skipped; totals are recomputed
        from the counts.
        """
        records: Dict[ItemKey, AttemptRecord] = {}
        for raw_key, raw_record in data.items():
            try:
                key = ItemKey.from_storage_key(raw_key)
                correct = int(raw_record.get("correct", 0))
                incorrect = int(raw_record.get("incorrect", 0))
                if correct < 0 or incorrect < 0:
                    raise ValueError("negative count")
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable ledger entry {raw_key!r}: {e}")
                continue
            records[key] = AttemptRecord(correct=correct, incorrect=incorrect, total=correct + incorrect)
        ledger = cls()
        ledger._records.update(records)
        return ledger
