from __future__ import annotations

import random
import time
from typing import Callable


class ThrottleRetryPolicy:
    """Backoff schedule for requests the upstream rejected with HTTP 429.

    Only throttled responses are retried; every other status is returned to
    the caller untouched. ``max_retries`` counts retries, so a request makes at
    most ``max_retries + 1`` physical attempts.
    """

    retry_status_codes = frozenset({429})

    def __init__(
        self,
        *,
        max_retries: int = 2,
        min_wait_seconds: float = 0.1,
        max_wait_seconds: float = 2.0,
        jitter_ratio: float = 0.1,
        sleep_fn: Callable[[float], None] = time.sleep,
        random_fn: Callable[[float, float], float] = random.uniform,
    ) -> None:
        self.max_retries = max_retries
        self.min_wait_seconds = min_wait_seconds
        self.max_wait_seconds = max_wait_seconds
        self.jitter_ratio = jitter_ratio
        self.sleep_fn = sleep_fn
        self.random_fn = random_fn

    def should_retry(self, status_code: int, retries_done: int) -> bool:
        return status_code in self.retry_status_codes and retries_done < self.max_retries

    def delay_for_retry(self, retry_number: int) -> float:
        base = min(self.max_wait_seconds, self.min_wait_seconds * (2 ** (retry_number - 1)))
        if self.jitter_ratio <= 0:
            return base
        jitter_multiplier = 1.0 + self.random_fn(-self.jitter_ratio, self.jitter_ratio)
        return max(self.min_wait_seconds, min(self.max_wait_seconds, base * jitter_multiplier))
