"""Schemas and validation for performance entries.

An `Entry` is one scored record for one track on one date. A `DailyRecord`
holds at most one entry per track. Both are plain dataclasses; conversion to
and from the stored JSON shape lives here as well.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from .errors import InvalidNumericInput, OutOfRangeHours

Track = Literal["normal", "forklift"]
TRACKS: tuple[Track, ...] = ("normal", "forklift")

MIN_HOURS = 0.0
MAX_HOURS = 16.0
# The entry dialog refuses shifts shorter than one hour.
MIN_SUBMITTED_HOURS = 1.0


@dataclass(frozen=True)
class Entry:
    """Raw performance and worked hours for one track on one date."""

    performance: float
    hours: float
    overtime: bool = False
    free_day: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "performance": self.performance,
            "hours": self.hours,
            "overtime": self.overtime,
            "freeDay": self.free_day,
        }


@dataclass(frozen=True)
class DailyRecord:
    """Entries worked on one calendar date, at most one per track."""

    normal: Entry | None = None
    forklift: Entry | None = None

    def get(self, track: Track) -> Entry | None:
        if track == "normal":
            return self.normal
        if track == "forklift":
            return self.forklift
        raise ValueError(f"Unknown track: {track!r}")

    def with_entry(self, track: Track, entry: Entry | None) -> DailyRecord:
        """Return a copy with one track replaced (or cleared with None)."""
        if track == "normal":
            return DailyRecord(normal=entry, forklift=self.forklift)
        if track == "forklift":
            return DailyRecord(normal=self.normal, forklift=entry)
        raise ValueError(f"Unknown track: {track!r}")

    def is_empty(self) -> bool:
        return self.normal is None and self.forklift is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for track in TRACKS:
            entry = self.get(track)
            if entry is not None:
                out[track] = entry.to_dict()
        return out


def parse_number(field: str, value: Any) -> float:
    """Coerce a form value to a finite float or raise InvalidNumericInput."""
    if isinstance(value, bool) or value is None:
        raise InvalidNumericInput(field, value)
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise InvalidNumericInput(field, value) from None
    if not math.isfinite(num):
        raise InvalidNumericInput(field, value)
    return num


def from_dict(data: Mapping[str, Any]) -> Entry:
    """Convert a dictionary (stored or form shaped) to an `Entry`.

    Accepts both `freeDay` (stored) and `free_day` (form) spellings.
    """
    free_day = data.get("freeDay", data.get("free_day", False))
    return Entry(
        performance=parse_number("Performance", data.get("performance")),
        hours=parse_number("Hours", data.get("hours")),
        overtime=bool(data.get("overtime", False)),
        free_day=bool(free_day),
    )


def record_from_dict(data: Mapping[str, Any]) -> DailyRecord:
    """Build a `DailyRecord` from its stored mapping; unknown keys are rejected."""
    unknown = set(data) - set(TRACKS)
    if unknown:
        raise ValueError(f"Unexpected keys in daily record: {sorted(unknown)}")
    return DailyRecord(
        normal=from_dict(data["normal"]) if data.get("normal") else None,
        forklift=from_dict(data["forklift"]) if data.get("forklift") else None,
    )


def track_entry(record: DailyRecord | Mapping[str, Any] | None, track: Track) -> Any:
    """Return the entry for `track` from a record or a raw stored mapping."""
    if record is None:
        return None
    if isinstance(record, DailyRecord):
        return record.get(track)
    return record.get(track) or None


def validate(entry: Entry, *, submitted: bool = False) -> list[str]:
    """Return a list of human-readable issues if validation fails.

    With `submitted` the stricter dialog bound (at least one hour) applies.
    """
    issues: list[str] = []
    try:
        ensure_valid(entry, submitted=submitted)
    except OutOfRangeHours as exc:
        issues.append(f"Hours must be between {exc.low:g} and {exc.high:g}.")
    return issues


def ensure_valid(entry: Entry, *, submitted: bool = False) -> Entry:
    """Raise OutOfRangeHours when the hours fall outside the accepted range."""
    low = MIN_SUBMITTED_HOURS if submitted else MIN_HOURS
    if not (low <= entry.hours <= MAX_HOURS):
        raise OutOfRangeHours(entry.hours, low, MAX_HOURS)
    return entry


def entry_from_form(
    data: Mapping[str, Any], *, submitted: bool = False
) -> tuple[Entry | None, list[str]]:
    """Coerce and validate raw form input in one step.

    Returns `(entry, [])` on success, or `(None, problems)` when a field is
    not numeric or out of range.
    """
    try:
        entry = from_dict(data)
    except InvalidNumericInput as exc:
        if exc.field == "Performance":
            return None, ["Performance must be a number (e.g. 7.25)."]
        return None, [f"Hours must be a number between {MIN_HOURS:g} and {MAX_HOURS:g}."]
    problems = validate(entry, submitted=submitted)
    return (None, problems) if problems else (entry, [])
