"""Linux sysfs-based ambient light sensor backend."""

from __future__ import annotations

import glob
from pathlib import Path

from ..protocol import SensorBackend, SensorCapability, SensorReading
from ..registry import SensorRegistry


@SensorRegistry.register
class LinuxSysfsBackend(SensorBackend):
    """
    Linux IIO ambient light sensor backend.

    Reads from /sys/bus/iio/devices/*/in_illuminance_raw or similar paths.
    """

    SYSFS_PATHS = [
        "/sys/bus/iio/devices/iio:device*/in_illuminance_input",
        "/sys/bus/iio/devices/iio:device*/in_illuminance_raw",
        "/sys/bus/acpi/devices/ACPI0008:00/iio:device*/in_illuminance_raw",
    ]

    def __init__(self, patterns: list[str] | None = None):
        self._patterns = patterns or self.SYSFS_PATHS
        self._device_path: Path | None = None
        self._scale = 1.0
        self._find_device()

    def _find_device(self) -> None:
        """Find an available ALS device in sysfs."""
        for pattern in self._patterns:
            for path in sorted(glob.glob(pattern)):
                device = Path(path)
                if not device.exists():
                    continue
                self._device_path = device
                # *_input is already in lux; *_raw needs the scale factor
                scale_path = device.parent / "in_illuminance_scale"
                if device.name.endswith("_raw") and scale_path.exists():
                    try:
                        self._scale = float(scale_path.read_text().strip())
                    except (ValueError, OSError):
                        self._scale = 1.0
                return

    @property
    def name(self) -> str:
        return "Linux sysfs"

    @property
    def platform(self) -> str:
        return "linux"

    @property
    def capabilities(self) -> set[SensorCapability]:
        return {SensorCapability.LUX, SensorCapability.RAW}

    def is_available(self) -> bool:
        return self._device_path is not None and self._device_path.exists()

    def read(self) -> SensorReading:
        if not self._device_path:
            return SensorReading(error="No ALS device found")

        try:
            raw = float(self._device_path.read_text().strip())
        except (ValueError, OSError) as e:
            return SensorReading(error=str(e))
        return SensorReading(lux=raw * self._scale, raw_value=raw, confidence=0.85)
