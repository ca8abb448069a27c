from __future__ import annotations

import time
from threading import Lock
from typing import Callable


class RateLimiter:
    """Spaces dispatches at least ``period / rate`` seconds apart.

    There is no burst allowance: the first acquisition passes immediately and
    every later one is scheduled one interval after the slot handed out
    before it, whichever thread asked for it.
    """

    def __init__(
        self,
        rate: int = 5,
        period_seconds: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate < 1:
            raise ValueError("rate must be at least 1")
        if period_seconds <= 0:
            raise ValueError("period_seconds must be greater than zero")
        self.rate = rate
        self.period_seconds = period_seconds
        self.interval_seconds = period_seconds / rate
        self._clock = clock
        self._sleep_fn = sleep_fn
        self._lock = Lock()
        self._next_slot: float | None = None

    def acquire(self) -> float:
        with self._lock:
            now = self._clock()
            slot = now if self._next_slot is None else max(now, self._next_slot)
            self._next_slot = slot + self.interval_seconds
        wait_seconds = slot - now
        if wait_seconds > 0:
            self._sleep_fn(wait_seconds)
        return slot
