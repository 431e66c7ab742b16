import json
import os

from trackers.performance_agent.backend.config import (
    TrackerConfig,
    load_from_env,
    load_tracker_config,
)
from trackers.performance_agent.backend.forms import Entry
from trackers.performance_agent.backend.utils import (
    describe_entry,
    display_date,
    get_default_hours,
    get_shift_length,
)


def test_load_tracker_config_resolves_relative_data_path(tmp_path):
    path = tmp_path / "tracker.json"
    path.write_text(
        json.dumps(
            {
                "tracker": {"name": "Warehouse"},
                "worker": "Sam",
                "data_path": "records.json",
                "timezone": "Europe/Helsinki",
                "shift_length_hours": 10,
            }
        ),
        encoding="utf-8",
    )
    cfg = load_tracker_config(str(path))
    assert cfg.name == "Warehouse"
    assert cfg.worker == "Sam"
    assert cfg.data_path == os.path.join(str(tmp_path), "records.json")
    assert cfg.timezone == "Europe/Helsinki"
    assert cfg.default_hours == 8.0
    assert cfg.shift_length_hours == 10


def test_load_from_env_overrides_and_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("PERFORMANCE_CONFIG_PATH", raising=False)
    monkeypatch.setenv("PERFORMANCE_DATA_PATH", str(tmp_path / "x.json"))
    monkeypatch.setenv("PERFORMANCE_TZ", "UTC")
    cfg = load_from_env(default_path=str(tmp_path / "missing.json"))
    assert isinstance(cfg, TrackerConfig)
    assert cfg.data_path == str(tmp_path / "x.json")
    assert cfg.timezone == "UTC"


def test_unreadable_config_falls_back_to_defaults(tmp_path, monkeypatch):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("PERFORMANCE_CONFIG_PATH", str(bad))
    monkeypatch.delenv("PERFORMANCE_DATA_PATH", raising=False)
    monkeypatch.delenv("PERFORMANCE_TZ", raising=False)
    assert load_from_env() == TrackerConfig()


def test_env_number_settings(monkeypatch):
    monkeypatch.setenv("PERFORMANCE_DEFAULT_HOURS", "7.5")
    monkeypatch.setenv("PERFORMANCE_SHIFT_LENGTH", "oops")
    assert get_default_hours() == 7.5
    assert get_shift_length() == 8


def test_describe_entry():
    assert display_date("2025-09-01") == "01.09.2025"
    assert describe_entry("Picking", Entry(performance=7.25, hours=8)) == (
        "Picking: 7.25 (100%) in 8h (normal)"
    )
    assert describe_entry("Forklift", Entry(performance=4, hours=8, free_day=True)).endswith(
        "(overtime)"
    )


def test_default_data_path_stays_relative_to_working_directory(tmp_path):
    path = tmp_path / "tracker.json"
    path.write_text(json.dumps({"tracker": {"name": "Warehouse"}, "worker": ""}), encoding="utf-8")
    cfg = load_tracker_config(str(path))
    assert cfg.data_path == "performance_data.json"
    assert cfg.worker is None
