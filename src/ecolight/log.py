"""Event logging: pretty lines on a terminal, Loki-style JSON when piped.

Events go to stderr so command output (``--json``) stays machine-readable.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime

from rich.console import Console

ENABLED = True

_console = Console(stderr=True)


def set_enabled(enabled: bool) -> None:
    """Turn event output on or off (the library and tests run quiet)."""
    global ENABLED
    ENABLED = enabled


def _log_json(level: str, msg: str, **kwargs) -> None:
    """Output a JSON log line (Loki-style)."""
    entry = {"ts": datetime.now().isoformat(), "level": level, "msg": msg, **kwargs}
    print(json.dumps(entry, default=str), file=sys.stderr, flush=True)


def _log_pretty(level: str, msg: str, **kwargs) -> None:
    """Output a human-readable log line with rich formatting."""
    ts = datetime.now().strftime("%H:%M:%S")
    level_colors = {"info": "green", "error": "red", "warn": "yellow"}
    color = level_colors.get(level, "white")

    if msg == "session_started":
        _console.print(
            f"[dim]{ts}[/] [bold {color}]measuring[/] {kwargs.get('plant', '?')} "
            f"[dim]for {kwargs.get('duration', '?')}s[/]"
        )
    elif msg == "session_rejected":
        _console.print(f"[dim]{ts}[/] [yellow]busy[/] a session is already {kwargs.get('state', 'active')}")
    elif msg == "record_saved":
        verdict = {True: "[green]suitable[/]", False: "[red]not suitable[/]"}.get(kwargs.get("suitable"), "?")
        _console.print(f"[dim]{ts}[/] [bold]record #{kwargs.get('id', '?')}[/] {verdict}")
    elif msg in ("record_failed", "sensor_error"):
        _console.print(f"[dim]{ts}[/] [red]error[/] {kwargs.get('error', '?')}")
    else:
        extra = " ".join(f"[dim]{k}=[/]{v}" for k, v in kwargs.items())
        _console.print(f"[dim]{ts}[/] [{color}]{msg}[/] {extra}")


def log(level: str, msg: str, **kwargs) -> None:
    """Log an event - pretty for TTY, JSON for pipes."""
    if not ENABLED:
        return
    if sys.stderr.isatty():
        _log_pretty(level, msg, **kwargs)
    else:
        _log_json(level, msg, **kwargs)
