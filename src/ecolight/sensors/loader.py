"""Plugin loading for sensor backends."""

from __future__ import annotations

import importlib.metadata
from typing import TYPE_CHECKING

from ..log import log
from .registry import SensorRegistry

if TYPE_CHECKING:
    from .protocol import SensorBackend

ENTRY_POINT_GROUP = "ecolight.sensors"


def load_plugins() -> None:
    """
    Load sensor plugins from entry points.

    Plugins can register via pyproject.toml:

    [project.entry-points."ecolight.sensors"]
    my_sensor = "my_package.sensors:MySensorBackend"
    """
    for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
        try:
            backend_class = ep.load()
        except (ImportError, AttributeError) as e:
            log("warn", "plugin_failed", plugin=ep.name, error=str(e))
            continue
        # Check if it looks like a SensorBackend
        if (
            isinstance(backend_class, type)
            and hasattr(backend_class, "name")
            and hasattr(backend_class, "is_available")
            and hasattr(backend_class, "read")
        ):
            SensorRegistry.register(backend_class)


def load_builtin_backends() -> None:
    """Load the built-in sensor backends."""
    # Import backends to trigger registration
    from . import backends  # noqa: F401


def discover_backends() -> list[dict]:
    """Discover and list all registered backends."""
    load_builtin_backends()
    load_plugins()
    return SensorRegistry.list_backends()


def get_best_backend(name: str | None = None) -> SensorBackend | None:
    """Get a backend by class name, or the best one for this platform."""
    load_builtin_backends()
    load_plugins()

    if name:
        return SensorRegistry.get_by_name(name)
    return SensorRegistry.get_for_platform()
