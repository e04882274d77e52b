"""Time operations abstraction for testing."""

from patchflow.core.time.abc import Time
from patchflow.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
