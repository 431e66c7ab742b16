"""CSV export of stored performance records."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping, Sequence

from ..forms import TRACKS, DailyRecord
from ..scoring import entry_effective_hours, performance_percentage

RECORD_FIELDS = (
    "date",
    "track",
    "performance",
    "hours",
    "overtime",
    "free_day",
    "effective_hours",
    "percentage",
)


def record_rows(records: Mapping[str, DailyRecord]) -> list[dict[str, object]]:
    """Flatten daily records into one scored row per (date, track), date ordered."""
    rows: list[dict[str, object]] = []
    for key in sorted(records):
        for track in TRACKS:
            entry = records[key].get(track)
            if entry is None:
                continue
            rows.append(
                {
                    "date": key,
                    "track": track,
                    "performance": entry.performance,
                    "hours": entry.hours,
                    "overtime": entry.overtime,
                    "free_day": entry.free_day,
                    "effective_hours": round(entry_effective_hours(entry), 3),
                    "percentage": performance_percentage(entry),
                }
            )
    return rows


def render_csv(rows: Iterable[dict[str, object]], fieldnames: Sequence[str] = RECORD_FIELDS) -> str:
    """Render dict rows to a CSV string; keys outside `fieldnames` are ignored."""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row or {})
    return buf.getvalue()
