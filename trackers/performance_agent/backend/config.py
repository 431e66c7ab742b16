from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = "performance_data.json"


@dataclass
class TrackerConfig:
    name: str = ""
    worker: str | None = None
    data_path: str = DEFAULT_DATA_PATH
    timezone: str | None = None  # IANA name, e.g. Europe/Helsinki
    default_hours: float = 8.0
    shift_length_hours: int = 8


def load_tracker_config(path: str) -> TrackerConfig:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    tracker = data.get("tracker") or {}
    cfg = TrackerConfig(
        name=str(tracker.get("name") or ""),
        worker=(str(data["worker"]) if data.get("worker") else None),
        timezone=(str(data["timezone"]) if data.get("timezone") else None),
    )
    if data.get("default_hours") is not None:
        cfg.default_hours = float(data["default_hours"])
    if data.get("shift_length_hours") is not None:
        cfg.shift_length_hours = int(data["shift_length_hours"])
    # A relative data_path set in the file is resolved against the file's folder;
    # without one the default stays relative to the working directory.
    if data.get("data_path"):
        cfg.data_path = str(data["data_path"])
        if not os.path.isabs(cfg.data_path):
            cfg.data_path = os.path.join(os.path.dirname(os.path.abspath(path)), cfg.data_path)
    return cfg


def load_from_env(default_path: str | None = None) -> TrackerConfig:
    """Build the tracker config from PERFORMANCE_CONFIG_PATH and overrides.

    Environment variables (PERFORMANCE_DATA_PATH, PERFORMANCE_TZ) take
    precedence over the file. A missing or unreadable file yields defaults.
    """
    path = os.environ.get("PERFORMANCE_CONFIG_PATH") or default_path
    cfg = TrackerConfig()
    if path and os.path.isfile(path):
        try:
            cfg = load_tracker_config(path)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable tracker config %s: %s", path, exc)
    data_path = os.environ.get("PERFORMANCE_DATA_PATH")
    if data_path:
        cfg.data_path = data_path
    tz = os.environ.get("PERFORMANCE_TZ")
    if tz:
        cfg.timezone = tz
    return cfg
