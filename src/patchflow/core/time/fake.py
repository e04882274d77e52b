"""Fake Time implementation for testing.

FakeTime is an in-memory implementation that tracks sleep() calls without
actually sleeping, enabling fast tests. Sleeping advances the fake monotonic
clock so deadline loops terminate.
"""

from patchflow.core.time.abc import Time


class FakeTime(Time):
    """Fake implementation that tracks calls without sleeping.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(self, *, start: float = 0.0) -> None:
        self._now = start
        self._sleep_calls: list[float] = []

    @property
    def sleep_calls(self) -> list[float]:
        """Read-only access to tracked sleep calls for test assertions.

        Returns list of seconds values passed to sleep().
        """
        return self._sleep_calls

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        self._now += seconds

    def monotonic(self) -> float:
        return self._now
