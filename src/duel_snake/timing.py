"""Fixed-interval gating against a monotonic clock."""

from __future__ import annotations

import time
from collections.abc import Callable

Clock = Callable[[], float]


class IntervalGate:
    """Fires at most once per *interval* seconds of *clock*.

    Polled once per rendered frame; a firing restamps the gate with the
    current time.
    """

    def __init__(self, interval: float, clock: Clock = time.monotonic) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self.interval = interval
        self._clock = clock
        self._last = clock()

    def ready(self) -> bool:
        """Return True and restamp if the interval has elapsed."""
        now = self._clock()
        if now - self._last >= self.interval:
            self._last = now
            return True
        return False

    def restart(self) -> None:
        """Restart the interval from the current time."""
        self._last = self._clock()
