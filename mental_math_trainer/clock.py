from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class OneShotTimer:
    """A single pending deadline, polled against a Clock.

    Arming replaces any pending deadline, so at most one transition is ever
    scheduled. ``poll()`` disarms the timer before reporting it due.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._deadline_s: float | None = None

    @property
    def armed(self) -> bool:
        return self._deadline_s is not None

    def arm(self, delay_s: float) -> None:
        if delay_s < 0.0:
            raise ValueError("delay_s must be >= 0")
        self._deadline_s = self._clock.now() + float(delay_s)

    def cancel(self) -> None:
        self._deadline_s = None

    def remaining_s(self) -> float | None:
        if self._deadline_s is None:
            return None
        return max(0.0, self._deadline_s - self._clock.now())

    def poll(self) -> bool:
        """Return True exactly once when the pending deadline has passed."""
        if self._deadline_s is None:
            return False
        if self._clock.now() < self._deadline_s:
            return False
        self._deadline_s = None
        return True
