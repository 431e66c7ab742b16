"""Half-month periods and per-period aggregation of stored records."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any, Literal

from .forms import DailyRecord, Track, track_entry
from .scoring import rescale_percentage, round_half_up

logger = logging.getLogger(__name__)

PeriodLabel = Literal["first half", "second half"]

DATE_KEY_FORMAT = "%Y-%m-%d"
FIRST_HALF_LAST_DAY = 15


def date_key(day: date) -> str:
    """Return the zero-padded YYYY-MM-DD key used for stored records."""
    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> date:
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def period_for_date(day: date) -> PeriodLabel:
    return "first half" if day.day <= FIRST_HALF_LAST_DAY else "second half"


def period_filter(label: PeriodLabel) -> Callable[[date], bool]:
    """Return a predicate matching dates of the given half of any month."""
    if label == "first half":
        return lambda d: d.day <= FIRST_HALF_LAST_DAY
    if label == "second half":
        return lambda d: d.day > FIRST_HALF_LAST_DAY
    raise ValueError(f"Unknown period: {label!r}")


def _performance_of(entry: Any) -> float:
    if isinstance(entry, Mapping):
        raw = entry.get("performance")
    else:
        raw = getattr(entry, "performance", None)
    if isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _select_totals(
    records: Mapping[str, DailyRecord | Mapping[str, Any]],
    include: Callable[[date], bool],
    track: Track,
) -> tuple[float, int]:
    total = 0.0
    count = 0
    for key, record in records.items():
        try:
            day = parse_date_key(key)
        except (TypeError, ValueError):
            logger.debug("Skipping record with malformed date key %r", key)
            continue
        if not include(day):
            continue
        entry = track_entry(record, track)
        if entry is None:
            continue
        total += _performance_of(entry)
        count += 1
    return total, count


def mean_performance(
    records: Mapping[str, DailyRecord | Mapping[str, Any]],
    include: Callable[[date], bool],
    track: Track = "normal",
) -> float:
    """Mean raw performance of `track` over the dates accepted by `include`.

    Keys that are not valid dates are skipped. A missing or non-numeric
    performance counts as 0. Returns 0.0 when nothing is selected.
    """
    total, count = _select_totals(records, include, track)
    return total / count if count else 0.0


def round_cents(value: float) -> float:
    """Round to two decimals, halves upwards (10.625 -> 10.63)."""
    return round_half_up(value * 100) / 100


def period_summary(
    records: Mapping[str, DailyRecord | Mapping[str, Any]],
    day: date,
    track: Track = "normal",
    *,
    all_months: bool = False,
) -> dict[str, Any]:
    """Summarize the period containing `day` for one track.

    The period is the same half of the same month as `day`. With `all_months`
    the matching half of every stored month is included. The mean is rounded
    to cents before it is rescaled.
    """
    label = period_for_date(day)
    half = period_filter(label)

    def include(d: date) -> bool:
        if all_months:
            return half(d)
        return d.year == day.year and d.month == day.month and half(d)

    total, count = _select_totals(records, include, track)
    mean = round_cents(total / count) if count else 0.0
    return {
        "period": label,
        "year": day.year,
        "month": day.month,
        "track": track,
        "all_months": all_months,
        "entries": count,
        "mean_performance": mean,
        "percentage": rescale_percentage(mean),
    }
