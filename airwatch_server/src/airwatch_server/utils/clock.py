import time
from typing import Callable

# smallest step used to keep insertion timestamps strictly increasing
_TICK = 1e-6


class MonotonicClock:
    """Wall clock that never returns the same or an earlier value twice.

    Not thread-safe on its own; stores call it while holding their lock.
    """

    def __init__(self, now: Callable[[], float] = time.time):
        self._now = now
        self._last = 0.0

    def __call__(self) -> float:
        ts = max(self._now(), self._last + _TICK)
        self._last = ts
        return ts
