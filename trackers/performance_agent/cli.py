from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from agents import Agent, ModelSettings, RunContextWrapper, function_tool, run_demo_loop
from dotenv import load_dotenv
from typing_extensions import NotRequired, TypedDict

from .backend.agent import EntryFormSession, scored_payload
from .backend.config import TrackerConfig, load_from_env
from .backend.errors import StoreError
from .backend.exporters.csv import record_rows, render_csv
from .backend.forms import TRACKS, Entry, Track, from_dict
from .backend.parsers import parse_freeform, resolve_date_phrase, resolve_tz
from .backend.periods import date_key, parse_date_key, period_summary as summarize_period
from .backend.shifts import classify_now, default_start_time, minutes_of_day
from .backend.store import RecordStore
from .backend.timecalc import add_hours, duration_hours
from .backend.utils import describe_entry, display_date, get_default_hours, get_shift_length

load_dotenv()

logger = logging.getLogger(__name__)

TRACK_LABELS = {"normal": "Picking", "forklift": "Forklift"}
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "tracker.example.json")


@dataclass
class TrackerContext:
    """Per-run context shared by the tools."""

    config: TrackerConfig = field(default_factory=TrackerConfig)
    store: RecordStore | None = None
    default_hours: float = 8.0
    shift_length: int = 8

    def now(self) -> datetime:
        return datetime.now(resolve_tz(self.config.timezone))

    def records(self) -> RecordStore:
        if self.store is None:
            self.store = RecordStore(self.config.data_path)
        return self.store


def _check_date(date: str) -> str | None:
    try:
        parse_date_key(date)
    except (TypeError, ValueError):
        return f"Date must be YYYY-MM-DD, got {date!r}."
    return None


def record_entry(
    context: TrackerContext,
    *,
    date: str,
    performance: Any,
    hours: Any = None,
    overtime: bool = False,
    free_day: bool = False,
    track: str = "normal",
    start_time: str | None = None,
    end_time: str | None = None,
) -> dict[str, Any]:
    """Run one entry through the form flow and store it on success.

    Explicit hours win; otherwise they come from the sign-in/sign-out times,
    pre-filled from the current shift when missing.
    """
    problems: list[str] = []
    date_problem = _check_date(date)
    if date_problem:
        problems.append(date_problem)
    if track not in TRACKS:
        problems.append(f"Track must be one of {', '.join(TRACKS)}.")
    if problems:
        return {"status": "error", "problems": problems}

    session = EntryFormSession(
        default_hours=context.default_hours, shift_length=context.shift_length
    )
    events = session.open(context.now())
    if start_time:
        events += session.set_start_time(start_time)
    if end_time:
        events += session.set_end_time(end_time)
    errors = [e.payload["message"] for e in events if e.type == "error"]
    if errors:
        return {"status": "error", "problems": errors}

    session.update(
        performance=performance,
        overtime=overtime,
        free_day=free_day,
        forklift=(track == "forklift"),
    )
    if hours is not None:
        session.update(hours=hours)
    result = session.submit()[-1]
    if result.type != "submitted":
        return {"status": "error", "problems": result.payload.get("problems", [])}

    entry = from_dict(result.payload["entry"])
    try:
        context.records().upsert(date, result.payload["track"], entry)
    except StoreError as exc:
        logger.error("Could not store entry for %s: %s", date, exc)
        return {"status": "error", "problems": [str(exc)]}
    return {"status": "ok", "date": date, **result.payload}


@function_tool
def submit_performance(
    ctx: RunContextWrapper[TrackerContext],
    date: str,
    performance: float,
    hours: float | None = None,
    overtime: bool = False,
    free_day: bool = False,
    track: str = "normal",
    start_time: str | None = None,
    end_time: str | None = None,
) -> dict[str, Any]:
    """Record the performance for one date and track, replacing any earlier entry.

    Args:
        date: Work date in YYYY-MM-DD format.
        performance: Raw performance figure (e.g., 7.25).
        hours: Hours worked (1-16). Omit to derive from sign-in/sign-out times.
        overtime: True for an overtime shift on a regular day.
        free_day: True for work on a day off (overrides overtime).
        track: "normal" or "forklift".
        start_time: Optional sign-in time HH:MM.
        end_time: Optional sign-out time HH:MM.
    """
    return record_entry(
        ctx.context,
        date=date,
        performance=performance,
        hours=hours,
        overtime=overtime,
        free_day=free_day,
        track=track,
        start_time=start_time,
        end_time=end_time,
    )


@function_tool
def submit_freeform(ctx: RunContextWrapper[TrackerContext], text: str) -> dict[str, Any]:
    """Record an entry from a short line like "7.5 in 8h overtime forklift on 2025-09-01"."""
    parsed = parse_freeform(text)
    if parsed["performance"] is None:
        return {"status": "error", "problems": ["Performance must be a number (e.g. 7.25)."]}
    date = parsed["date"] or date_key(ctx.context.now().date())
    return record_entry(
        ctx.context,
        date=date,
        performance=parsed["performance"],
        hours=parsed["hours"],
        overtime=parsed["overtime"],
        free_day=parsed["free_day"],
        track=parsed["track"],
        start_time=parsed["start_time"],
        end_time=parsed["end_time"],
    )


class EntryInput(TypedDict):
    """One entry for bulk submission.

    Fields:
        date: Work date YYYY-MM-DD (required).
        performance: Raw performance (required).
        hours: Optional hours worked.
        overtime: Optional overtime flag.
        free_day: Optional free-day flag.
        track: Optional "normal" or "forklift".
    """

    date: str
    performance: float
    hours: NotRequired[float]
    overtime: NotRequired[bool]
    free_day: NotRequired[bool]
    track: NotRequired[str]


@function_tool
def bulk_submit_performance(
    ctx: RunContextWrapper[TrackerContext], entries: list[EntryInput]
) -> dict[str, Any]:
    """Record several entries at once, e.g. when catching up on a week."""
    added = 0
    issues: list[dict[str, Any]] = []
    for item in entries or []:
        res = record_entry(
            ctx.context,
            date=item.get("date", ""),
            performance=item.get("performance"),
            hours=item.get("hours", ctx.context.default_hours),
            overtime=bool(item.get("overtime", False)),
            free_day=bool(item.get("free_day", False)),
            track=item.get("track") or "normal",
        )
        if res["status"] == "ok":
            added += 1
        else:
            issues.append({"date": item.get("date"), "problems": res["problems"]})
    status = "ok" if added and not issues else ("partial" if added else "error")
    return {"status": status, "added": added, "issues": issues}


@function_tool
def current_shift(ctx: RunContextWrapper[TrackerContext]) -> dict[str, Any]:
    """Return the running shift with its default sign-in, sign-out and hours."""
    now = ctx.context.now()
    minutes = minutes_of_day(now)
    start = default_start_time(minutes)
    end = add_hours(start, ctx.context.shift_length)
    return {
        "now": now.strftime("%H:%M"),
        "shift": classify_now(minutes),
        "start_time": start,
        "end_time": end,
        "hours": round(duration_hours(start, end), 2),
    }


@function_tool
def day_summary(ctx: RunContextWrapper[TrackerContext], date: str) -> dict[str, Any]:
    """Describe the entries stored for one date (YYYY-MM-DD)."""
    problem = _check_date(date)
    if problem:
        return {"status": "error", "problems": [problem]}
    record = ctx.context.records().get(date)
    if record is None or record.is_empty():
        return {"status": "empty", "date": date}
    lines = [display_date(date)]
    scored: list[dict[str, Any]] = []
    for track in TRACKS:
        entry: Entry | None = record.get(track)
        if entry is None:
            continue
        lines.append(describe_entry(TRACK_LABELS[track], entry))
        scored.append(scored_payload(entry, track))
    return {"status": "ok", "date": date, "summary": "\n".join(lines), "entries": scored}


@function_tool
def delete_day(ctx: RunContextWrapper[TrackerContext], date: str) -> dict[str, Any]:
    """Delete every entry stored for one date (YYYY-MM-DD)."""
    problem = _check_date(date)
    if problem:
        return {"status": "error", "problems": [problem]}
    removed = ctx.context.records().delete(date)
    return {"status": "ok" if removed else "empty", "date": date}


def summarize(
    context: TrackerContext,
    date: str | None = None,
    track: str = "normal",
    all_months: bool = False,
) -> dict[str, Any]:
    """Period summary for the half-month containing `date` (default today)."""
    day_key = date or date_key(context.now().date())
    problem = _check_date(day_key)
    if problem:
        return {"status": "error", "problems": [problem]}
    if track not in TRACKS:
        return {"status": "error", "problems": [f"Track must be one of {', '.join(TRACKS)}."]}
    selected: Track = "forklift" if track == "forklift" else "normal"
    summary = summarize_period(
        context.records().load(), parse_date_key(day_key), selected, all_months=all_months
    )
    return {"status": "ok", **summary}


@function_tool
def period_summary(
    ctx: RunContextWrapper[TrackerContext],
    date: str | None = None,
    track: str = "normal",
    all_months: bool = False,
) -> dict[str, Any]:
    """Mean performance and scaled percentage for the half-month containing a date.

    Args:
        date: Any date in the period (YYYY-MM-DD). Defaults to today.
        track: "normal" or "forklift".
        all_months: Include the same half of every stored month, not just this one.
    """
    return summarize(ctx.context, date, track, all_months)


@function_tool
def resolve_date(phrase: str, timezone: str | None = None, base_date: str | None = None) -> str:
    """Resolve a relative or natural-language date to ISO YYYY-MM-DD.

    Args:
        phrase: A date like "today", "yesterday", "last friday" or "9.9.2025".
        timezone: Optional IANA timezone. Defaults to env PERFORMANCE_TZ or system tz.
        base_date: Optional YYYY-MM-DD anchor for relative phrases.
    Returns:
        ISO date string (YYYY-MM-DD), or empty string if not understood.
    """
    tz = timezone or os.environ.get("PERFORMANCE_TZ")
    return resolve_date_phrase(phrase, timezone=tz, base_date=base_date)


@function_tool
def export_csv(ctx: RunContextWrapper[TrackerContext]) -> str:
    """Export all stored entries as CSV, one row per date and track."""
    csv_text = render_csv(record_rows(ctx.context.records().load()))
    save_path = os.environ.get("PERFORMANCE_SAVE_PATH")
    if save_path:
        try:
            folder = os.path.dirname(save_path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(save_path, "w", encoding="utf-8") as f:
                f.write(csv_text)
        except OSError as exc:
            # The tool output stays strictly CSV content.
            logger.warning("Could not write CSV to %s: %s", save_path, exc)
    return csv_text


def agent_instructions(config: TrackerConfig | None = None) -> str:
    instructions = (
        "You are a concise assistant for a warehouse worker tracking their shift performance. "
        "Each entry has a date (YYYY-MM-DD), a raw performance figure, hours worked (1-16), "
        "an overtime flag, a free-day flag and a track: 'normal' (picking) or 'forklift'. "
        "Ask for missing performance or date; never invent values. "
        "If the user gives sign-in/sign-out times instead of hours, pass start_time/end_time and omit hours. "
        "If neither hours nor times are given, call current_shift and confirm the suggested times first. "
        "Use resolve_date for relative dates such as 'yesterday' or 'last friday'; do not guess. "
        "After submit_performance, report the percentage it returns. "
        "Use day_summary and period_summary to answer questions about a day or the current half-month period, "
        "pass all_months=true to period_summary when asked about that half of every month, "
        "delete_day to remove a date, and export_csv when asked for a CSV (return only the CSV). "
        "Reply in the user's language and keep answers short."
    )
    if config and config.name:
        instructions += f" This tracker is called \"{config.name}\"."
    if config and config.worker:
        instructions += f" The worker's name is {config.worker}."
    return instructions


def build_agent(model_name: str, config: TrackerConfig | None = None) -> Agent[TrackerContext]:
    return Agent[TrackerContext](
        name="Performance Tracker",
        instructions=agent_instructions(config),
        tools=[
            resolve_date,
            current_shift,
            submit_performance,
            submit_freeform,
            bulk_submit_performance,
            day_summary,
            delete_day,
            period_summary,
            export_csv,
        ],
        model=model_name,
        model_settings=ModelSettings(),
    )


def build_context(default_config_path: str | None = DEFAULT_CONFIG_PATH) -> TrackerContext:
    config = load_from_env(default_path=default_config_path)
    default_hours = config.default_hours
    if os.environ.get("PERFORMANCE_DEFAULT_HOURS"):
        default_hours = get_default_hours()
    shift_length = config.shift_length_hours
    if os.environ.get("PERFORMANCE_SHIFT_LENGTH"):
        shift_length = get_shift_length()
    return TrackerContext(
        config=config,
        store=RecordStore(config.data_path),
        default_hours=default_hours,
        shift_length=shift_length,
    )


async def main() -> None:
    logging.basicConfig(
        level=os.environ.get("PERFORMANCE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    model = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")

    if not os.environ.get("OPENAI_API_KEY"):
        print("Warning: OPENAI_API_KEY is not set. Set it in your shell or a .env file.")

    context = build_context()
    agent = build_agent(model, context.config)
    try:
        context.records().load()
    except StoreError as exc:
        logger.error("Record store %s is unusable: %s", context.config.data_path, exc)
        raise SystemExit(1) from exc
    title = context.config.name or "Performance Tracker"
    greeting = f", {context.config.worker}" if context.config.worker else ""
    print(f"{title} ready{greeting}. Log an entry or ask for your period summary. Ctrl+C to exit.")
    await run_demo_loop(agent, stream=True, context=context)


if __name__ == "__main__":
    asyncio.run(main())
