from __future__ import annotations

import os

from .forms import Entry
from .scoring import performance_percentage


def get_default_hours() -> float:
    """Return the configured default form hours (default 8.0)."""
    try:
        val = float(os.environ.get("PERFORMANCE_DEFAULT_HOURS", "8") or 8)
        return val if 0 < val <= 16 else 8.0
    except ValueError:
        return 8.0


def get_shift_length() -> int:
    """Return the configured sign-out offset in whole hours (default 8)."""
    try:
        val = int(os.environ.get("PERFORMANCE_SHIFT_LENGTH", "8") or 8)
        return val if 0 < val <= 16 else 8
    except ValueError:
        return 8


def display_date(key: str) -> str:
    """Render a YYYY-MM-DD key as DD.MM.YYYY."""
    year, month, day = key.split("-")
    return f"{day}.{month}.{year}"


def shift_kind(entry: Entry) -> str:
    """Label an entry as "overtime" (overtime or free day) or "normal"."""
    return "overtime" if entry.overtime or entry.free_day else "normal"


def describe_entry(label: str, entry: Entry) -> str:
    """One-line summary, e.g. "Picking: 7.25 (100%) in 8h (normal)"."""
    return (
        f"{label}: {_strip_trailing_zero(entry.performance)} "
        f"({performance_percentage(entry)}%) in {_strip_trailing_zero(entry.hours)}h "
        f"({shift_kind(entry)})"
    )


def _strip_trailing_zero(x: float) -> str:
    s = f"{x:.2f}"
    if s.endswith(".00"):
        return s[:-3]
    if s.endswith("0"):
        return s[:-1]
    return s
