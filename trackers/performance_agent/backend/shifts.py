"""Shift classification by time of day.

The windows overlap between 13:45 and 14:15. They are checked in order and the
first match wins, so the overlap belongs to the morning shift.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Literal, NamedTuple

ShiftCategory = Literal["morning", "evening", "night"]


class ShiftWindow(NamedTuple):
    shift: ShiftCategory
    start: int  # minutes of day, inclusive
    end: int  # minutes of day, exclusive
    sign_in: str


# Order matters: morning must be checked before evening.
SHIFT_WINDOWS: tuple[ShiftWindow, ...] = (
    ShiftWindow("morning", 5 * 60 + 45, 14 * 60 + 15, "05:45"),
    ShiftWindow("evening", 13 * 60 + 45, 22 * 60 + 15, "13:45"),
)
NIGHT_SIGN_IN = "21:45"


def minutes_of_day(moment: datetime | time) -> int:
    """Minutes since midnight for a datetime or time (seconds are ignored)."""
    return moment.hour * 60 + moment.minute


def _match(now_minutes: int) -> ShiftWindow | None:
    for window in SHIFT_WINDOWS:
        if window.start <= now_minutes < window.end:
            return window
    return None


def classify_now(now_minutes: int) -> ShiftCategory:
    """Return the shift running at the given minute of the day."""
    window = _match(now_minutes)
    return window.shift if window else "night"


def default_start_time(now_minutes: int) -> str:
    """Return the sign-in time of the shift running at the given minute."""
    window = _match(now_minutes)
    return window.sign_in if window else NIGHT_SIGN_IN
