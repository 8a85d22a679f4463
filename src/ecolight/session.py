"""
Timed light-analysis sessions.

State machine:

    IDLE --start()--> RUNNING --deadline--> FINALIZING --record stored--> IDLE
      |                                         ^
      +----------start(duration=0)--------------+

While RUNNING every sensor sample is buffered and a progress tick updates
``progress`` (0..1) and ``time_remaining`` (whole seconds). At the deadline
the buffered samples are averaged (or the current illuminance is used when
none arrived) and the result is handed to the ResultAssembler, whose plant
search may block for a while. A new session can only start from IDLE.

Sample delivery and the progress tick may run on different threads; both
take the controller lock before touching state or the buffer.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from .assembler import ResultAssembler
from .log import log
from .readings import LightReadingBuffer
from .records import PersistedRequestRecord
from .scheduler import ScheduledTask, Scheduler, ThreadScheduler
from .sensors.feed import SensorFeed
from .storage import StorageError

DEFAULT_TICK_INTERVAL = 0.1  # seconds between progress updates

T = TypeVar("T")


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"


class Observable(Generic[T]):
    """A value plus change listeners. Written by one owner, read by anyone."""

    def __init__(self, value: T):
        self._value = value
        self._listeners: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for listener in list(self._listeners):
            listener(value)

    def add_listener(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove


@dataclass
class AnalysisSession:
    """One measurement window and, once finished, its outcome."""

    plant_name: str
    duration_seconds: int
    started_at: float
    image_ref: str | None = None
    readings: LightReadingBuffer = field(default_factory=LightReadingBuffer)
    average_lux: float | None = None
    record: PersistedRequestRecord | None = None
    error: Exception | None = None
    _done: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def end_at(self) -> float:
        return self.started_at + self.duration_seconds

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> PersistedRequestRecord:
        """
        Block until the session's record is stored and return it.

        Raises TimeoutError if the session is still going after ``timeout``
        seconds, or the storage error that prevented saving.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"session for {self.plant_name!r} still running")
        if self.error is not None:
            raise self.error
        if self.record is None:
            raise RuntimeError(f"session for {self.plant_name!r} finished without a record")
        return self.record


class AnalysisSessionController:
    """
    Runs analysis sessions against a live sensor feed.

    The controller subscribes to the feed when constructed and releases the
    subscription on ``close()`` (or when used as a context manager).

    Observables:
        current_lux     latest sensor value (0.0 until the sensor reports)
        is_analyzing    True while RUNNING
        is_searching    True while the plant search / save is in flight
        progress        fraction of the window elapsed, reset to 0 at the end
        time_remaining  whole seconds left in the window
    """

    def __init__(
        self,
        feed: SensorFeed,
        assembler: ResultAssembler,
        scheduler: Scheduler | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ):
        self.feed = feed
        self.assembler = assembler
        self.scheduler = scheduler or ThreadScheduler()
        self.tick_interval = tick_interval

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._session: AnalysisSession | None = None
        self._task: ScheduledTask | None = None

        initial = feed.latest if feed.latest is not None and feed.latest >= 0 else 0.0
        self.current_lux: Observable[float] = Observable(float(initial))
        self.is_analyzing: Observable[bool] = Observable(False)
        self.is_searching: Observable[bool] = Observable(False)
        self.progress: Observable[float] = Observable(0.0)
        self.time_remaining: Observable[int] = Observable(0)

        self._token: int | None = feed.subscribe(self.on_sensor_sample)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> AnalysisSession | None:
        """The session currently running or finalizing, if any."""
        return self._session

    def on_sensor_sample(self, lux: float) -> None:
        """Feed callback: track the latest value and buffer it while running."""
        if lux is None or not math.isfinite(lux) or lux < 0:
            return
        with self._lock:
            self.current_lux.set(float(lux))
            if self._state is SessionState.RUNNING and self._session is not None:
                self._session.readings.append(lux, self.scheduler.now())

    def start(
        self,
        plant_name: str,
        image_ref: str | None = None,
        duration_seconds: int = 0,
    ) -> AnalysisSession | None:
        """
        Begin a session.

        Returns None, without changing anything, when another session is
        running or finalizing. A zero duration measures the current
        illuminance instantly and finalizes before returning.
        """
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be >= 0, got {duration_seconds}")

        with self._lock:
            if self._token is None:
                raise RuntimeError("controller is closed")
            if self._state is not SessionState.IDLE:
                log("warn", "session_rejected", plant=plant_name, state=self._state.value)
                return None

            session = AnalysisSession(
                plant_name=plant_name,
                duration_seconds=duration_seconds,
                started_at=self.scheduler.now(),
                image_ref=image_ref,
            )
            self._session = session
            self._state = SessionState.RUNNING
            self.is_analyzing.set(True)
            self.progress.set(0.0)
            self.time_remaining.set(duration_seconds)
            log("info", "session_started", plant=plant_name, duration=duration_seconds)

            if duration_seconds > 0:
                self._task = self.scheduler.call_every(self.tick_interval, self._tick)
                return session

            average, trace = self._begin_finalizing(session)

        self._complete(session, average, trace)
        return session

    def _tick(self) -> None:
        with self._lock:
            session = self._session
            if self._state is not SessionState.RUNNING or session is None:
                return

            now = self.scheduler.now()
            elapsed = now - session.started_at
            self.progress.set(min(1.0, max(0.0, elapsed / session.duration_seconds)))
            self.time_remaining.set(max(0, math.ceil(session.end_at - now)))
            if now < session.end_at:
                return

            if self._task is not None:
                self._task.cancel()
                self._task = None
            average, trace = self._begin_finalizing(session)

        self._complete(session, average, trace)

    def _begin_finalizing(self, session: AnalysisSession) -> tuple[float, list[float]]:
        """Close the sampling window. Caller holds the lock."""
        self._state = SessionState.FINALIZING
        self.is_analyzing.set(False)

        trace = session.readings.values()
        average = session.readings.mean()
        if average is None:
            average = self.current_lux.value
        session.average_lux = average

        self.progress.set(0.0)
        self.time_remaining.set(0)
        log("info", "session_finalizing", plant=session.plant_name, samples=len(trace), average=round(average, 1))
        return average, trace

    def _complete(self, session: AnalysisSession, average: float, trace: list[float]) -> None:
        """Search, judge and store, outside the lock so sampling is never blocked."""
        self.is_searching.set(True)
        try:
            session.record = self.assembler.assemble(
                session.plant_name,
                average,
                session.duration_seconds,
                trace,
                session.image_ref,
            )
            log("info", "record_saved", id=session.record.id, suitable=session.record.is_suitable)
        except StorageError as e:
            session.error = e
            log("error", "record_failed", error=str(e))
        except Exception as e:
            session.error = e
            log("error", "record_failed", error=repr(e))
            raise
        finally:
            self.is_searching.set(False)
            with self._lock:
                self._state = SessionState.IDLE
                self._session = None
            session._done.set()

    def close(self) -> None:
        """Release the feed subscription. Idempotent."""
        with self._lock:
            token, self._token = self._token, None
        if token is not None:
            self.feed.unsubscribe(token)

    @property
    def closed(self) -> bool:
        return self._token is None

    def __enter__(self) -> AnalysisSessionController:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
