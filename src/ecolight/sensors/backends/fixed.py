"""Fixed-value backend for overrides, demos and tests."""

from __future__ import annotations

from ..protocol import SensorBackend, SensorCapability, SensorReading
from ..registry import ANY_PLATFORM, SensorRegistry


@SensorRegistry.register
class FixedLuxBackend(SensorBackend):
    """
    Reports a constant illuminance.

    Unavailable until a value is set, so it never shadows a real sensor
    during automatic selection.
    """

    def __init__(self, lux: float | None = None):
        self.lux = lux

    @property
    def name(self) -> str:
        return "Fixed value"

    @property
    def platform(self) -> str:
        return ANY_PLATFORM

    @property
    def capabilities(self) -> set[SensorCapability]:
        return {SensorCapability.LUX}

    def is_available(self) -> bool:
        return self.lux is not None

    def read(self) -> SensorReading:
        if self.lux is None:
            return SensorReading(error="No value set")
        return SensorReading(lux=float(self.lux))
