"""
Clock and periodic-task scheduling.

The session controller and sensor feed never call ``time`` directly; they
take a Scheduler so that the progress loop can be driven by wall-clock
threads in the CLI and stepped deterministically in tests:

    scheduler = ManualScheduler()
    task = scheduler.call_every(0.1, tick)
    scheduler.advance(1.0)   # runs tick ten times, no real waiting
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol


class ScheduledTask(Protocol):
    """Handle returned by Scheduler.call_every."""

    def cancel(self) -> None:
        """Stop further invocations. Safe to call more than once."""
        ...


class Scheduler(Protocol):
    """Monotonic clock plus fixed-cadence task scheduling."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """Invoke callback every interval seconds until the task is cancelled."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block the calling flow for the given number of seconds."""
        ...


class _ThreadTask:
    """Periodic task running on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self._interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._callback()

    def cancel(self) -> None:
        self._stopped.set()


class ThreadScheduler:
    """Wall-clock scheduler backed by time.monotonic and daemon threads."""

    def now(self) -> float:
        return time.monotonic()

    def call_every(self, interval: float, callback: Callable[[], None]) -> _ThreadTask:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        return _ThreadTask(interval, callback)

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class _ManualTask:
    def __init__(self, interval: float, callback: Callable[[], None], origin: float):
        self.interval = interval
        self.callback = callback
        self.origin = origin
        self.runs = 0
        self.cancelled = False

    @property
    def next_due(self) -> float:
        return self.origin + (self.runs + 1) * self.interval

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler whose clock only moves when told to.

    ``sleep`` advances the clock without firing tasks, mirroring a blocking
    call that holds up the current flow. ``advance`` fires every task that
    falls due, in due-time order, moving the clock to each due time first.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._tasks: list[_ManualTask] = []

    def now(self) -> float:
        return self._now

    def call_every(self, interval: float, callback: Callable[[], None]) -> _ManualTask:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        task = _ManualTask(interval, callback, self._now)
        self._tasks.append(task)
        return task

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self._now += seconds

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running due tasks along the way."""
        target = self._now + seconds
        while True:
            due = [t for t in self._tasks if not t.cancelled and t.next_due <= target + 1e-9]
            if not due:
                break
            task = min(due, key=lambda t: t.next_due)
            self._now = max(self._now, task.next_due)
            task.runs += 1
            task.callback()
        self._tasks = [t for t in self._tasks if not t.cancelled]
        self._now = max(self._now, target)

    @property
    def pending(self) -> int:
        """Number of live periodic tasks."""
        return sum(1 for t in self._tasks if not t.cancelled)
