"""Effective-hours normalization and performance scoring."""

from __future__ import annotations

import math

from .forms import Entry

# Relative value of an extra (overtime) hour versus a standard hour.
OVERTIME_RATE = 0.967
# Unpaid break deducted from a regular shift.
BREAK_HOURS = 0.75
FULL_SHIFT_HOURS = 8.0
# Eight nominal hours after the break deduction.
BASE_EFFECTIVE = FULL_SHIFT_HOURS - BREAK_HOURS
SHORT_SHIFT_HOURS = 4.0
MAX_OVERTIME_HOURS = 16.0

# Mean performance band mapped onto the 100-150 display band.
REFERENCE_LOW = 7.25
REFERENCE_HIGH = 10.88
DISPLAY_LOW = 100
DISPLAY_SPAN = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def effective_hours(hours: float, overtime: bool, free_day: bool) -> float:
    """Convert worked hours into effective hours.

    - Free day (overrides overtime): every hour counts at the overtime rate.
    - Overtime: hours are clamped to [8, 16]; the first eight count as 7.25 and
      the rest at the overtime rate.
    - Regular: under 4h counts in full, 4-8h loses the break, beyond 8h the
      extra hours count at the overtime rate.
    """
    if free_day:
        return hours * OVERTIME_RATE
    if overtime:
        clamped = max(FULL_SHIFT_HOURS, min(hours, MAX_OVERTIME_HOURS))
        return BASE_EFFECTIVE + (clamped - FULL_SHIFT_HOURS) * OVERTIME_RATE
    if hours < SHORT_SHIFT_HOURS:
        return hours
    if hours <= FULL_SHIFT_HOURS:
        return hours - BREAK_HOURS
    return BASE_EFFECTIVE + (hours - FULL_SHIFT_HOURS) * OVERTIME_RATE


def entry_effective_hours(entry: Entry) -> float:
    return effective_hours(entry.hours, entry.overtime, entry.free_day)


def performance_percentage(entry: Entry) -> int:
    """Performance as a percentage of effective hours; 0 when there are none."""
    eff = entry_effective_hours(entry)
    if eff <= 0:
        return 0
    return round_half_up(entry.performance / eff * 100)


def rescale_percentage(mean_performance: float) -> int:
    """Map a mean performance from [7.25, 10.88] onto [100, 150].

    Values outside the reference band extrapolate linearly and are not clamped.
    """
    ratio = (mean_performance - REFERENCE_LOW) / (REFERENCE_HIGH - REFERENCE_LOW)
    return round_half_up(ratio * DISPLAY_SPAN + DISPLAY_LOW)
