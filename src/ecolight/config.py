"""User configuration stored as JSON under ~/.config/ecolight."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

CONFIG_DIR = Path.home() / ".config/ecolight"
CONFIG_FILE = CONFIG_DIR / "config.json"
RECORDS_FILE = CONFIG_DIR / "records.json"


@dataclass(frozen=True)
class Settings:
    """Tunables for sessions, the sensor feed and storage."""

    duration_seconds: int = 10
    tick_interval: float = 0.1  # progress update cadence, seconds
    search_delay: float = 1.0  # simulated plant-search latency, seconds
    poll_interval: float = 0.2  # sensor polling cadence, seconds
    records_file: Path = RECORDS_FILE
    catalog_file: Path | None = None
    sensor_backend: str | None = None  # backend class name to force

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from a config dict, ignoring unknown or mistyped keys."""
        settings = cls()
        updates: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            value = data[f.name]
            try:
                if f.name in ("records_file", "catalog_file"):
                    updates[f.name] = Path(value).expanduser()
                elif f.name == "duration_seconds":
                    updates[f.name] = max(0, int(value))
                elif f.name == "sensor_backend":
                    updates[f.name] = str(value)
                else:
                    number = float(value)
                    # intervals drive periodic tasks and must be positive
                    if number > 0 or (f.name == "search_delay" and number == 0):
                        updates[f.name] = number
            except (TypeError, ValueError):
                continue
        return replace(settings, **updates)

    def override(self, **kwargs: Any) -> Settings:
        """Copy with the non-None keyword values applied (CLI flags)."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})


def load_config(path: Path = CONFIG_FILE) -> Settings:
    """Load settings from file, falling back to defaults."""
    config: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path) as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                config = loaded
        except (OSError, json.JSONDecodeError):
            pass
    return Settings.from_dict(config)
