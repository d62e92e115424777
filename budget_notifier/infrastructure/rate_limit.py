"""Sliding-window throttling for outbound email sends."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable


class SlidingWindowRateLimiter:
    """Allow at most ``max_calls`` acquisitions in any rolling ``period`` seconds.

    Attributes:
        max_calls: Calls permitted per window
        period: Window length in seconds
    """

    def __init__(
        self,
        max_calls: int,
        period: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        self.max_calls = max_calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._calls: deque[float] = deque()
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        while self._calls and now - self._calls[0] >= self.period:
            self._calls.popleft()

    def get_wait_time(self) -> float:
        """Seconds until another call is allowed (0 if available now)."""

        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._calls) < self.max_calls:
                return 0.0
            return max(self.period - (now - self._calls[0]), 0.0)

    def acquire(self, block: bool = True) -> bool:
        """Record a call, waiting for a free slot when ``block`` is set."""

        while True:
            with self._lock:
                now = self._clock()
                self._evict(now)
                if len(self._calls) < self.max_calls:
                    self._calls.append(now)
                    return True
                wait = self.period - (now - self._calls[0])
            if not block:
                return False
            self._sleep(max(wait, 0.0))


__all__ = ["SlidingWindowRateLimiter"]
