"""Wall-clock sources shared by the billing components."""

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


class SimulatedClock:
    """Manually advanced clock for simulations and tests.

    Parameters
    ----------
    start : datetime
        Initial time returned by the clock.
    """

    def __init__(self, start: datetime) -> None:
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time."""
        if delta < timedelta(0):
            raise ValueError("SimulatedClock cannot move backwards")
        with self._lock:
            self._now += delta
            return self._now
