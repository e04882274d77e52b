"""Time operations abstraction for testing.

This module provides an ABC for clock operations so that the release poll
loop can be tested without actually sleeping.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Sleep for specified number of seconds."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a monotonic clock, used to compute poll deadlines."""
        ...
