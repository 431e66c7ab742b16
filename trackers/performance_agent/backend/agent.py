"""Entry form flow for recording a performance entry.

This module drives the form the user fills in for one date:
    open (pre-fill times) → edit → submit → reset.

Each step returns `AgentEvent`s so a CLI or server can stream them to a UI.
The current moment is always passed in by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, time
from typing import Any

from .errors import InvalidTimeFormat
from .forms import Entry, Track, entry_from_form
from .scoring import entry_effective_hours, performance_percentage
from .shifts import classify_now, default_start_time, minutes_of_day
from .timecalc import add_hours, duration_hours

logger = logging.getLogger(__name__)


@dataclass
class AgentEvent:
    """A simple event structure suitable for streaming to a UI."""

    type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class FormState:
    """Raw values of the entry form, kept as typed by the user."""

    performance: str = ""
    hours: str = "8"
    overtime: bool = False
    free_day: bool = False
    start_time: str = ""
    end_time: str = ""
    forklift: bool = False

    @property
    def track(self) -> Track:
        return "forklift" if self.forklift else "normal"


class EntryFormSession:
    """Pre-fills sign-in/sign-out times and validates the submitted entry."""

    def __init__(self, *, default_hours: float = 8.0, shift_length: int = 8) -> None:
        self.default_hours = default_hours
        self.shift_length = shift_length
        self.form = self._blank()
        self.shift: str | None = None

    def _blank(self) -> FormState:
        return FormState(hours=f"{self.default_hours:g}")

    def open(self, now: datetime | time) -> list[AgentEvent]:
        """Open the form at `now`, filling in any missing sign-in/sign-out time."""
        now_minutes = minutes_of_day(now)
        self.shift = classify_now(now_minutes)
        events = [AgentEvent(type="opened", payload={"shift": self.shift})]
        if not self.form.start_time.strip():
            self.form.start_time = default_start_time(now_minutes)
        if not self.form.end_time.strip():
            self._derive_end()
        events.append(AgentEvent(type="prefilled", payload={"form": asdict(self.form)}))
        return events

    def set_start_time(self, value: str) -> list[AgentEvent]:
        """Change sign-in time; sign-out moves to one shift length later."""
        previous = (self.form.start_time, self.form.end_time, self.form.hours)
        self.form.start_time = value
        try:
            self._derive_end()
        except InvalidTimeFormat as exc:
            self.form.start_time, self.form.end_time, self.form.hours = previous
            return [AgentEvent(type="error", payload={"message": str(exc)})]
        return [AgentEvent(type="times_changed", payload=self._times())]

    def set_end_time(self, value: str) -> list[AgentEvent]:
        """Change sign-out time and recompute hours from the sign-in time."""
        try:
            hours = duration_hours(self.form.start_time, value) if self.form.start_time else None
        except InvalidTimeFormat as exc:
            return [AgentEvent(type="error", payload={"message": str(exc)})]
        self.form.end_time = value
        if hours is not None:
            self.form.hours = f"{hours:.2f}"
        return [AgentEvent(type="times_changed", payload=self._times())]

    def update(self, **fields: Any) -> list[AgentEvent]:
        """Set plain form fields (performance, hours, overtime, free_day, forklift)."""
        allowed = {"performance", "hours", "overtime", "free_day", "forklift"}
        unknown = sorted(set(fields) - allowed)
        if unknown:
            return [AgentEvent(type="error", payload={"message": f"Unknown fields: {unknown}"})]
        for name, value in fields.items():
            if name in ("overtime", "free_day", "forklift"):
                value = bool(value)
            elif value is not None:
                value = str(value)
            else:
                value = ""
            setattr(self.form, name, value)
        return [AgentEvent(type="updated", payload={"form": asdict(self.form)})]

    def submit(self) -> list[AgentEvent]:
        """Validate the form; on success emit the scored entry and reset."""
        entry, problems = entry_from_form(
            {
                "performance": self.form.performance,
                "hours": self.form.hours,
                "overtime": self.form.overtime,
                "free_day": self.form.free_day,
            },
            submitted=True,
        )
        if entry is None:
            return [
                AgentEvent(
                    type="needs_revision",
                    payload={"message": "Please correct the entry.", "problems": problems},
                )
            ]
        track = self.form.track
        logger.debug("Submitting %s entry: %s", track, entry)
        self.reset()
        return [AgentEvent(type="submitted", payload=scored_payload(entry, track))]

    def reset(self) -> None:
        self.form = self._blank()

    # --- Internal helpers ---

    def _derive_end(self) -> None:
        end = add_hours(self.form.start_time, self.shift_length)
        self.form.end_time = end
        self.form.hours = f"{duration_hours(self.form.start_time, end):.2f}"

    def _times(self) -> dict[str, Any]:
        return {
            "start_time": self.form.start_time,
            "end_time": self.form.end_time,
            "hours": self.form.hours,
        }


def scored_payload(entry: Entry, track: Track) -> dict[str, Any]:
    """Entry fields plus effective hours and percentage, for events and tools."""
    return {
        "track": track,
        "entry": entry.to_dict(),
        "effective_hours": round(entry_effective_hours(entry), 3),
        "percentage": performance_percentage(entry),
    }
