"""Sensor backend protocol and data types."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol, runtime_checkable


class SensorCapability(Enum):
    """Capabilities a sensor backend may provide."""

    LUX = auto()  # Illuminance in lux
    RAW = auto()  # Unscaled device counts
    CALIBRATION = auto()  # Accepts a known reference value


@dataclass
class SensorReading:
    """A single reading from a sensor backend."""

    lux: float | None = None
    raw_value: float | None = None
    confidence: float = 1.0
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        """True when the reading carries a usable, non-negative lux value."""
        if self.error is not None or self.lux is None:
            return False
        return math.isfinite(self.lux) and self.lux >= 0


@runtime_checkable
class SensorBackend(Protocol):
    """Protocol for ambient light sensor backends."""

    @property
    def name(self) -> str:
        """Human-readable name for this backend."""
        ...

    @property
    def platform(self) -> str:
        """Platform this backend runs on (linux, darwin, win32, or "any")."""
        ...

    @property
    def capabilities(self) -> set[SensorCapability]:
        """Set of capabilities this backend provides."""
        ...

    def is_available(self) -> bool:
        """Check if this backend can be used on the current system."""
        ...

    def read(self) -> SensorReading:
        """Take a reading. Returns a SensorReading with error set on failure."""
        ...
