"""Built-in sensor backends."""

from __future__ import annotations

import sys

from .fixed import FixedLuxBackend

__all__ = ["FixedLuxBackend"]

# Only import platform-specific backends
if sys.platform == "linux":
    from .linux import LinuxSysfsBackend

    __all__ += ["LinuxSysfsBackend"]
