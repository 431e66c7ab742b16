"""Error types raised by the performance tracker."""

from __future__ import annotations


class TrackerError(ValueError):
    """Base class for tracker input errors."""


class InvalidNumericInput(TrackerError):
    """A performance or hours field is not a finite number."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"{field} must be a number, got {value!r}")
        self.field = field
        self.value = value


class InvalidTimeFormat(TrackerError):
    """A clock time is not a zero-padded HH:MM value in 00:00-23:59."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid clock time {value!r}; expected HH:MM")
        self.value = value


class OutOfRangeHours(TrackerError):
    """Hours fall outside the range the entry form accepts."""

    def __init__(self, hours: float, low: float, high: float) -> None:
        super().__init__(f"Hours must be between {low:g} and {high:g}, got {hours:g}")
        self.hours = hours
        self.low = low
        self.high = high


class StoreError(TrackerError):
    """The record store cannot be read or holds an unknown shape."""
