"""JSON file storage for daily records.

The file maps YYYY-MM-DD keys to daily records. Older files stored a single
flat entry per date; those are read as the `normal` track and rewritten in the
current shape on the next save.

Every mutation is a read-modify-write of the whole file followed by an atomic
replace, so a single writer never loses updates.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from typing import Any

from .errors import StoreError, TrackerError
from .forms import DailyRecord, Entry, Track, ensure_valid, from_dict, record_from_dict
from .periods import parse_date_key

logger = logging.getLogger(__name__)


def _is_legacy_entry(value: Mapping[str, Any]) -> bool:
    return "performance" in value or "hours" in value


def migrate_records(raw: Mapping[str, Any]) -> dict[str, DailyRecord]:
    """Convert stored JSON into daily records, upgrading legacy flat entries."""
    records: dict[str, DailyRecord] = {}
    migrated = 0
    for key, value in raw.items():
        try:
            parse_date_key(key)
        except (TypeError, ValueError):
            raise StoreError(f"Invalid date key in store: {key!r}") from None
        if not isinstance(value, Mapping):
            raise StoreError(f"Record for {key} is not an object")
        try:
            if _is_legacy_entry(value):
                records[key] = DailyRecord(normal=from_dict(value))
                migrated += 1
            else:
                records[key] = record_from_dict(value)
        except (TrackerError, ValueError) as exc:
            raise StoreError(f"Record for {key} is invalid: {exc}") from exc
        if records[key].is_empty():
            del records[key]
    if migrated:
        logger.info("Migrated %d legacy record(s) to the track layout", migrated)
    return records


class RecordStore:
    """Daily records persisted as one JSON document."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> dict[str, DailyRecord]:
        if not os.path.isfile(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StoreError(f"{self.path} does not hold a JSON object")
        return migrate_records(raw)

    def save(self, records: Mapping[str, DailyRecord]) -> None:
        payload = {k: records[k].to_dict() for k in sorted(records) if not records[k].is_empty()}
        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".records-", suffix=".json", dir=folder)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        logger.debug("Saved %d record(s) to %s", len(payload), self.path)

    def get(self, key: str) -> DailyRecord | None:
        return self.load().get(key)

    def upsert(self, key: str, track: Track, entry: Entry) -> DailyRecord:
        """Store `entry` for one track on `key`, keeping the other track as is.

        Raises OutOfRangeHours for hours outside 0-16.
        """
        parse_date_key(key)
        ensure_valid(entry)
        records = self.load()
        record = records.get(key, DailyRecord()).with_entry(track, entry)
        records[key] = record
        self.save(records)
        logger.info("Stored %s entry for %s", track, key)
        return record

    def delete(self, key: str) -> bool:
        """Remove the whole daily record for `key`; returns False if absent."""
        records = self.load()
        if key not in records:
            return False
        del records[key]
        self.save(records)
        logger.info("Deleted record for %s", key)
        return True
