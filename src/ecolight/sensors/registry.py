"""Sensor backend registry with platform detection."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .protocol import SensorBackend

ANY_PLATFORM = "any"


class SensorRegistry:
    """
    Registry for sensor backends with platform detection.

    Supports:
    - Automatic platform detection
    - Manual backend selection by class name
    - Platform-independent fallbacks (platform == "any")
    """

    _backends: dict[str, type[SensorBackend]] = {}
    _instances: dict[str, SensorBackend] = {}

    @classmethod
    def register(cls, backend_class: type[SensorBackend]) -> type[SensorBackend]:
        """Register a backend class (decorator-friendly)."""
        cls._backends[backend_class.__name__] = backend_class
        return backend_class

    @classmethod
    def get_for_platform(cls, platform: str | None = None) -> SensorBackend | None:
        """Get the best available backend for the current/specified platform.

        Native backends win over platform-independent ones; among equals the
        one with most capabilities is chosen.
        """
        platform = platform or sys.platform

        candidates = []
        for name in cls._backends:
            instance = cls._get_instance(name)
            if instance is None or instance.platform not in (platform, ANY_PLATFORM):
                continue
            if instance.is_available():
                candidates.append(instance)

        if not candidates:
            return None

        return max(
            candidates,
            key=lambda b: (b.platform == platform, len(b.capabilities)),
        )

    @classmethod
    def get_by_name(cls, name: str) -> SensorBackend | None:
        """Get a specific backend by class name."""
        return cls._get_instance(name)

    @classmethod
    def _get_instance(cls, name: str) -> SensorBackend | None:
        """Get or create backend instance."""
        if name not in cls._instances and name in cls._backends:
            try:
                cls._instances[name] = cls._backends[name]()
            except (OSError, ValueError, TypeError):
                return None
        return cls._instances.get(name)

    @classmethod
    def list_backends(cls) -> list[dict]:
        """List all registered backends with status."""
        result = []
        for name in cls._backends:
            instance = cls._get_instance(name)
            if instance:
                result.append(
                    {
                        "name": name,
                        "display_name": instance.name,
                        "platform": instance.platform,
                        "available": instance.is_available(),
                        "capabilities": sorted(c.name for c in instance.capabilities),
                    }
                )
        return result

    @classmethod
    def clear(cls) -> None:
        """Clear all registered backends (for testing)."""
        cls._backends.clear()
        cls._instances.clear()
