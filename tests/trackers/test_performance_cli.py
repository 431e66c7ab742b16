import json
import os

from trackers.performance_agent.backend.config import TrackerConfig
from trackers.performance_agent.backend.forms import Entry
from trackers.performance_agent.cli import (
    DEFAULT_CONFIG_PATH,
    TrackerContext,
    agent_instructions,
    build_context,
    record_entry,
    summarize,
)


def _context(tmp_path):
    return TrackerContext(config=TrackerConfig(data_path=str(tmp_path / "data.json")))


def test_record_entry_with_explicit_hours(tmp_path):
    context = _context(tmp_path)
    res = record_entry(context, date="2025-09-01", performance=7.25, hours=8)
    assert res["status"] == "ok"
    assert res["percentage"] == 100
    saved = json.loads((tmp_path / "data.json").read_text(encoding="utf-8"))
    assert saved == {
        "2025-09-01": {
            "normal": {"performance": 7.25, "hours": 8.0, "overtime": False, "freeDay": False}
        }
    }


def test_record_entry_derives_hours_from_times(tmp_path):
    context = _context(tmp_path)
    res = record_entry(
        context,
        date="2025-09-02",
        performance=8.5,
        track="forklift",
        start_time="21:45",
        end_time="06:15",
    )
    assert res["status"] == "ok"
    assert res["entry"]["hours"] == 8.5
    assert context.records().get("2025-09-02").forklift.hours == 8.5


def test_record_entry_reports_problems(tmp_path):
    context = _context(tmp_path)
    assert record_entry(context, date="2.9.2025", performance=7)["status"] == "error"
    assert record_entry(context, date="2025-09-02", performance=7, track="night")["status"] == "error"
    res = record_entry(context, date="2025-09-02", performance="abc", hours=8)
    assert res["problems"] == ["Performance must be a number (e.g. 7.25)."]
    res = record_entry(context, date="2025-09-02", performance=7, start_time="7pm")
    assert res["status"] == "error"
    assert context.records().load() == {}


def test_build_context_keeps_store_out_of_package_dir(tmp_path, monkeypatch):
    for name in (
        "PERFORMANCE_CONFIG_PATH",
        "PERFORMANCE_DATA_PATH",
        "PERFORMANCE_TZ",
        "PERFORMANCE_DEFAULT_HOURS",
        "PERFORMANCE_SHIFT_LENGTH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    context = build_context()
    assert context.config.name == "Warehouse performance"
    assert context.config.timezone == "Europe/Helsinki"
    assert context.config.data_path == "performance_data.json"
    assert context.default_hours == 8.0
    assert context.shift_length == 8
    package_dir = os.path.dirname(os.path.abspath(DEFAULT_CONFIG_PATH))
    assert not os.path.abspath(context.records().path).startswith(package_dir)


def test_agent_instructions_mention_tracker_and_worker():
    config = TrackerConfig(name="Warehouse performance", worker="Sam")
    text = agent_instructions(config)
    assert '"Warehouse performance"' in text
    assert "Sam" in text
    assert "Sam" not in agent_instructions(TrackerConfig())


def test_summarize_same_month_and_all_months(tmp_path):
    context = _context(tmp_path)
    store = context.records()
    store.upsert("2025-09-01", "normal", Entry(performance=7.25, hours=8))
    store.upsert("2025-10-02", "normal", Entry(performance=10.75, hours=8))
    res = summarize(context, "2025-09-03")
    assert res["status"] == "ok"
    assert res["entries"] == 1
    assert res["percentage"] == 100
    res = summarize(context, "2025-09-03", all_months=True)
    assert res["entries"] == 2
    assert res["mean_performance"] == 9.0
    assert summarize(context, "2025-09-03", track="night")["status"] == "error"


def test_summarize_defaults_to_today(tmp_path):
    context = _context(tmp_path)
    today = context.now().date()
    res = summarize(context)
    assert res["status"] == "ok"
    assert res["year"] == today.year
    assert res["month"] == today.month
    assert res["entries"] == 0
