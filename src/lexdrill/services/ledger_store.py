"""Stores that load and save stats ledger snapshots."""
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lexdrill.config import settings
from lexdrill.models.models import AttemptRecordRow
from lexdrill.models.vocabulary_models import STAT_KEY_SEPARATOR, Direction, ItemKey
from lexdrill.monitoring import ledger_saves
from lexdrill.services.ledger import StatsLedger

logger = logging.getLogger(__name__)

_DIRECTION_VALUES = {direction.value for direction in Direction}


def migrate_legacy_keys(data: Mapping[str, Mapping[str, int]]) -> Dict[str, Dict[str, int]]:
    """Attach the forward direction to keys stored without a direction suffix.

    Older snapshots keyed records by text id alone; those records were all
    collected in the forward direction. When a legacy key and its migrated
    form are both present their counts are added together.
    """
    migrated: Dict[str, Dict[str, int]] = {}
    legacy_count = 0
    for raw_key, raw_record in data.items():
        raw_key = str(raw_key)
        _, separator, suffix = raw_key.rpartition(STAT_KEY_SEPARATOR)
        if separator and suffix in _DIRECTION_VALUES:
            key = raw_key
        else:
            key = f"{raw_key}{STAT_KEY_SEPARATOR}{Direction.FORWARD.value}"
            legacy_count += 1

        record = dict(raw_record) if isinstance(raw_record, Mapping) else raw_record
        existing = migrated.get(key)
        if isinstance(existing, dict) and isinstance(record, dict):
            try:
                record = {
                    "correct": int(existing.get("correct", 0)) + int(record.get("correct", 0)),
                    "incorrect": int(existing.get("incorrect", 0)) + int(record.get("incorrect", 0)),
                }
            except (ValueError, TypeError) as e:
                logger.warning(f"Could not merge ledger entries for {key!r}, keeping {raw_key!r}: {e}")
        migrated[key] = record

    if legacy_count:
        logger.info(f"Migrated {legacy_count} legacy ledger keys to the {Direction.FORWARD.value} direction")
    return migrated


def _is_record_mapping(value) -> bool:
    return isinstance(value, Mapping) and all(isinstance(record, Mapping) for record in value.values())


def unwrap_snapshot(data: Mapping) -> Mapping:
    """Return the record mapping of a saved file.

    Files written here look like ``{"stats": {...}}``. Browser-store exports
    look like ``{"state": {"stats": {...}}, "version": n}``. A wrapper is only
    recognised when it holds nothing but records under ``stats``; anything
    else is taken as a flat snapshot.
    """
    if "version" in data and isinstance(data.get("state"), Mapping):
        state = data["state"]
        if _is_record_mapping(state.get("stats")):
            return state["stats"]
    if set(data) == {"stats"} and _is_record_mapping(data["stats"]):
        return data["stats"]
    return data


class LedgerStore(ABC):
    """Persistence boundary for the stats ledger."""

    backend: str = "base"

    @abstractmethod
    def _read(self) -> Mapping[str, Mapping[str, int]]:
        """Read the raw serialized snapshot."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _write(self, data: Dict[str, Dict[str, int]]) -> None:
        """Write a serialized snapshot."""
        raise NotImplementedError("Subclasses must implement this method")

    def load(self) -> StatsLedger:
        """Load the ledger, migrating legacy keys first."""
        ledger = StatsLedger.from_dict(migrate_legacy_keys(self._read()))
        logger.info(f"Loaded {len(ledger)} ledger records from {self.backend} store")
        return ledger

    def save(self, ledger: StatsLedger) -> None:
        """Persist the full ledger snapshot."""
        self._write(ledger.to_dict())
        ledger_saves.labels(backend=self.backend).inc()
        logger.debug(f"Saved {len(ledger)} ledger records to {self.backend} store")


class JsonLedgerStore(LedgerStore):
    """Ledger snapshot kept in a JSON file."""

    backend = "json"

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or settings.paths.ledger_file)

    def _read(self) -> Mapping[str, Mapping[str, int]]:
        if not self.path.exists():
            logger.info(f"No ledger file at {self.path}, starting empty")
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._set_aside(f"unreadable JSON: {e}")
            return {}
        if not isinstance(data, dict):
            self._set_aside("not a JSON object")
            return {}
        return unwrap_snapshot(data)

    def _set_aside(self, reason: str) -> None:
        """Move a damaged ledger file away so the next save does not overwrite it."""
        corrupt_path = self.path.with_suffix(self.path.suffix + ".corrupt")
        os.replace(self.path, corrupt_path)
        logger.warning(f"Ledger file {self.path} is corrupted ({reason}), moved to {corrupt_path}, starting empty")

    def _write(self, data: Dict[str, Dict[str, int]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"stats": data}, f, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)


class SqlLedgerStore(LedgerStore):
    """Ledger snapshot kept in the attempt_records table."""

    backend = "sql"

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def _read(self) -> Mapping[str, Mapping[str, int]]:
        rows = self.db.query(AttemptRecordRow).all()
        return {
            row.stat_key: {"correct": row.correct, "incorrect": row.incorrect, "total": row.total}
            for row in rows
        }

    def _write(self, data: Dict[str, Dict[str, int]]) -> None:
        try:
            existing = {row.stat_key: row for row in self.db.query(AttemptRecordRow).all()}
            for stat_key, record in data.items():
                row = existing.pop(stat_key, None)
                if row is None:
                    key = ItemKey.from_storage_key(stat_key)
                    row = AttemptRecordRow(
                        stat_key=stat_key,
                        text_id=key.text_id,
                        direction=key.direction.value,
                    )
                    self.db.add(row)
                row.correct = record["correct"]
                row.incorrect = record["incorrect"]
                row.total = record["total"]
            for row in existing.values():
                self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save ledger: {e}")
            self.db.rollback()
            raise


def get_ledger_store(db: Optional[Session] = None) -> LedgerStore:
    """Build the store selected by the LEDGER_BACKEND setting."""
    if settings.learning.ledger_backend == "sql":
        if db is None:
            raise ValueError("A database session is required for the sql ledger backend")
        return SqlLedgerStore(db)
    return JsonLedgerStore()
