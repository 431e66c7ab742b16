from trackers.performance_agent.backend.exporters.csv import record_rows, render_csv
from trackers.performance_agent.backend.forms import DailyRecord, Entry


def test_record_rows_are_scored_and_ordered():
    records = {
        "2025-09-02": DailyRecord(forklift=Entry(performance=3.25, hours=4)),
        "2025-09-01": DailyRecord(
            normal=Entry(performance=7.25, hours=8), forklift=Entry(performance=1, hours=2)
        ),
    }
    rows = record_rows(records)
    assert [(r["date"], r["track"]) for r in rows] == [
        ("2025-09-01", "normal"),
        ("2025-09-01", "forklift"),
        ("2025-09-02", "forklift"),
    ]
    assert rows[0]["percentage"] == 100
    assert rows[0]["effective_hours"] == 7.25
    assert rows[2]["percentage"] == 100


def test_render_csv_headers_and_values():
    out = render_csv(record_rows({"2025-09-01": DailyRecord(normal=Entry(performance=7.25, hours=8))}))
    lines = out.splitlines()
    assert lines[0] == "date,track,performance,hours,overtime,free_day,effective_hours,percentage"
    assert lines[1] == "2025-09-01,normal,7.25,8,False,False,7.25,100"


def test_render_csv_unknown_keys_ignored():
    out = render_csv([{"date": "2025-09-01", "track": "normal", "extra": 123}], ["date", "track"])
    assert ",123" not in out
    assert "2025-09-01,normal" in out
