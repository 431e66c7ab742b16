"""Clock-time arithmetic for sign-in and sign-out times.

Times are plain "HH:MM" strings with no date or timezone. Durations that
appear to run past midnight are resolved with an hour-only rule: when the end
hour is earlier than the start hour, the end belongs to the next day.
"""

from __future__ import annotations

import re

from .errors import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"(\d{1,2}):(\d{2})")


def parse_clock(text: str) -> int:
    """Return minutes since midnight for an "HH:MM" string.

    Raises InvalidTimeFormat for anything that is not an hour/minute pair in
    00:00-23:59.
    """
    m = _CLOCK_RE.fullmatch((text or "").strip()) if isinstance(text, str) else None
    if not m:
        raise InvalidTimeFormat(text)
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(text)
    return hour * 60 + minute


def format_clock(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM", wrapping at 24h."""
    hour, minute = divmod(minutes % MINUTES_PER_DAY, 60)
    return f"{hour:02d}:{minute:02d}"


def duration_hours(start: str, end: str) -> float:
    """Hours between two clock times.

    If the end hour is strictly less than the start hour the end is taken to be
    on the following day. Only the hour is compared, so 10:30 -> 10:00 is not
    rolled over and clamps to 0. The result is never negative.
    """
    start_min = parse_clock(start)
    end_min = parse_clock(end)
    if end_min // 60 < start_min // 60:
        end_min += MINUTES_PER_DAY
    return max(0.0, (end_min - start_min) / 60)


def add_hours(time: str, delta: int) -> str:
    """Add whole hours to a clock time, wrapping past midnight."""
    return format_clock(parse_clock(time) + int(delta) * 60)
