"""Freeform entry parsing and natural-language date resolution.

`parse_freeform` turns a short line such as
"7.5 in 8h overtime forklift on 2025-09-01" into a dictionary suitable for
`forms.entry_from_form`. Fields that cannot be found are left empty for
validation to catch.
"""

from __future__ import annotations

import re
from datetime import date as _date, datetime, timedelta, tzinfo as _tzinfo
from typing import Any
from zoneinfo import ZoneInfo

_HOUR_MARKERS = r"(?:h|hr|hrs|hour|hours)"
_NUMBER = r"\d+(?:[.,]\d+)?"


def parse_freeform(text: str) -> dict[str, Any]:
    """Parse a freeform performance line into structured fields.

    Heuristics:
    - Date: first YYYY-MM-DD match.
    - Times: "HH:MM-HH:MM" gives sign-in and sign-out.
    - Hours: first number followed by an hour marker (8h, 7.5 hours).
    - Performance: first remaining number that is not part of a date or time.
    - Flags: "overtime"/"ot", "free day"/"freeday", "forklift"/"truck".
    """
    s = text.strip()
    out: dict[str, Any] = {
        "date": "",
        "performance": None,
        "hours": None,
        "overtime": False,
        "free_day": False,
        "track": "normal",
        "start_time": None,
        "end_time": None,
    }
    if not s:
        return out

    date_match = re.search(r"\b(\d{4}-\d{2}-\d{2})\b", s)
    if date_match:
        out["date"] = date_match.group(1)

    times = re.search(r"\b(\d{1,2}:\d{2})\s*(?:-|–|to)\s*(\d{1,2}:\d{2})\b", s)
    if times:
        out["start_time"], out["end_time"] = times.group(1), times.group(2)

    # Blank out dates and clock times so their digits are not read as numbers.
    rest = re.sub(r"\d{4}-\d{2}-\d{2}|\d{1,2}:\d{2}", " ", s)

    hours_match = re.search(rf"\b({_NUMBER})\s*{_HOUR_MARKERS}\b", rest, flags=re.IGNORECASE)
    if hours_match:
        out["hours"] = _to_float(hours_match.group(1))
        rest = rest[: hours_match.start()] + " " + rest[hours_match.end() :]

    perf_match = re.search(rf"(?<![\w.,])({_NUMBER})(?![\w.,])", rest)
    if perf_match:
        out["performance"] = _to_float(perf_match.group(1))

    low = s.lower()
    out["overtime"] = bool(re.search(r"\b(overtime|ot)\b", low))
    out["free_day"] = bool(re.search(r"\bfree[\s-]?day\b", low))
    if re.search(r"\b(forklift|truck)\b", low):
        out["track"] = "forklift"
    return out


def _to_float(s: str) -> float | None:
    try:
        return float(s.replace(",", "."))
    except ValueError:
        return None


_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def resolve_tz(timezone: str | None = None) -> _tzinfo:
    """Return the IANA zone if valid, else the local zone, else UTC."""
    if timezone:
        try:
            return ZoneInfo(timezone)
        except (KeyError, ValueError):
            pass
    return datetime.now().astimezone().tzinfo or ZoneInfo("UTC")


def resolve_date_phrase(
    phrase: str,
    *,
    timezone: str | None = None,
    base_date: str | None = None,
) -> str:
    """Resolve relative or natural-language dates to ISO YYYY-MM-DD.

    Supported:
    - Relative: today, yesterday, tomorrow.
    - ISO: YYYY-MM-DD.
    - Day-first numeric: DD.MM.YYYY, and DD.MM. for the base year.
    - Weekday phrases: "this monday", "next tuesday", "last friday".

    Args:
        phrase: The user-provided date phrase.
        timezone: Optional IANA timezone. Defaults to the system zone or UTC.
        base_date: Optional YYYY-MM-DD anchor for relative phrases (tests).
    """
    s = (phrase or "").strip().lower()
    if not s:
        return ""

    today = _parse_iso_date(base_date) or datetime.now(resolve_tz(timezone)).date()

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        return s if _parse_iso_date(s) else ""

    if s in {"today", "tonight"}:
        return today.isoformat()
    if s == "yesterday":
        return (today - timedelta(days=1)).isoformat()
    if s == "tomorrow":
        return (today + timedelta(days=1)).isoformat()

    dmy = re.fullmatch(r"(\d{1,2})\.(\d{1,2})\.(\d{4})?", s)
    if dmy:
        year = int(dmy.group(3)) if dmy.group(3) else today.year
        try:
            return _date(year, int(dmy.group(2)), int(dmy.group(1))).isoformat()
        except ValueError:
            return ""

    wk = re.fullmatch(r"(this|next|last)\s+(" + "|".join(_WEEKDAYS) + ")", s)
    if wk:
        rel, wd = wk.group(1), wk.group(2)
        offset = (_WEEKDAYS[wd] - today.weekday()) % 7
        if rel == "next":
            offset += 7
        elif rel == "last":
            offset -= 7
        return (today + timedelta(days=offset)).isoformat()

    return ""


def _parse_iso_date(s: str | None) -> _date | None:
    if not s:
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None
