"""Push-style sensor feed built on top of a polled SensorBackend."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..log import log
from ..scheduler import ScheduledTask, Scheduler, ThreadScheduler
from .protocol import SensorReading

if TYPE_CHECKING:
    from .protocol import SensorBackend

SampleCallback = Callable[[float], None]

DEFAULT_POLL_INTERVAL = 0.2  # seconds


class SensorFeed:
    """
    Delivers illuminance samples to subscribers.

    A backend is polled every ``poll_interval`` seconds once ``start()`` is
    called; valid readings are pushed to every subscriber. ``publish()`` can
    also be called directly (tests, external drivers). The most recent value
    is available synchronously through ``latest``.

    Each ``subscribe()`` returns a token that must be passed to
    ``unsubscribe()`` exactly once.
    """

    def __init__(
        self,
        backend: SensorBackend | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        scheduler: Scheduler | None = None,
    ):
        self.backend = backend
        self.poll_interval = poll_interval
        self._scheduler = scheduler or ThreadScheduler()
        self._subscribers: dict[int, SampleCallback] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()
        self._latest: float | None = None
        self._task: ScheduledTask | None = None
        self._failing = False

    @property
    def latest(self) -> float | None:
        """Last published lux value, or None if nothing was ever reported."""
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: SampleCallback) -> int:
        with self._lock:
            token = next(self._tokens)
            self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            if self._subscribers.pop(token, None) is None:
                raise KeyError(f"unknown or already released subscription: {token}")

    def publish(self, lux: float) -> None:
        """Push a sample to all current subscribers."""
        with self._lock:
            self._latest = lux
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            callback(lux)

    def poll(self) -> SensorReading | None:
        """Read the backend once and publish the value if it is valid."""
        if self.backend is None:
            return None

        reading = self.backend.read()
        if reading.is_valid:
            self._failing = False
            self.publish(reading.lux)
        elif not self._failing:
            # Report once per failure streak, not on every poll
            self._failing = True
            log("warn", "sensor_error", backend=self.backend.name, error=reading.error or f"invalid lux {reading.lux}")
        return reading

    def start(self) -> None:
        """Begin polling the backend (no-op without a backend or if running)."""
        if self.backend is None or self._task is not None:
            return
        self.poll()
        self._task = self._scheduler.call_every(self.poll_interval, self.poll)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def __enter__(self) -> SensorFeed:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
