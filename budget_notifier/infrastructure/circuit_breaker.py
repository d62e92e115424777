"""Circuit breaker guarding the outbound email provider.

States:
    CLOSED: every call reaches the provider
    OPEN: calls are rejected without touching the provider

The breaker opens once ``failure_threshold`` consecutive failures have been
recorded. After ``reset_timeout`` seconds the first call closes it again and
goes through; because the failure counter is only cleared by a success, a
failure of that call reopens the breaker immediately.

Example:
    >>> breaker = CircuitBreaker(failure_threshold=10, reset_timeout=300.0)
    >>> if breaker.allow_request():
    ...     try:
    ...         provider.send(message)
    ...         breaker.record_success()
    ...     except EmailProviderError:
    ...         breaker.record_failure()
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"


@dataclass
class CircuitBreakerState:
    """Mutable state owned by a :class:`CircuitBreaker`."""

    failure_threshold: int
    reset_timeout: float
    consecutive_failures: int = 0
    is_open: bool = False
    opened_at: float | None = None


class CircuitBreaker:
    """Thread-safe consecutive-failure circuit breaker."""

    def __init__(
        self,
        failure_threshold: int = 10,
        reset_timeout: float = 300.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if reset_timeout <= 0:
            raise ValueError("reset_timeout must be positive")
        self._state = CircuitBreakerState(
            failure_threshold=failure_threshold, reset_timeout=reset_timeout
        )
        self._clock = clock
        self._lock = threading.RLock()

    @property
    def failure_threshold(self) -> int:
        return self._state.failure_threshold

    @property
    def reset_timeout(self) -> float:
        return self._state.reset_timeout

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._close_if_expired()
            return CircuitState.OPEN if self._state.is_open else CircuitState.CLOSED

    @property
    def consecutive_failures(self) -> int:
        with self._lock:
            return self._state.consecutive_failures

    def allow_request(self) -> bool:
        """Return ``True`` when a call may reach the provider."""

        with self._lock:
            self._close_if_expired()
            return not self._state.is_open

    def record_success(self) -> None:
        with self._lock:
            self._state.consecutive_failures = 0
            self._state.is_open = False
            self._state.opened_at = None

    def record_failure(self) -> None:
        with self._lock:
            self._state.consecutive_failures += 1
            if (
                not self._state.is_open
                and self._state.consecutive_failures >= self._state.failure_threshold
            ):
                self._state.is_open = True
                self._state.opened_at = self._clock()
                logger.warning(
                    "Email circuit breaker opened after %s consecutive failures",
                    self._state.consecutive_failures,
                )

    def reset(self) -> None:
        """Force the breaker closed and forget past failures."""

        self.record_success()

    def seconds_until_retry(self) -> float:
        """Return how long the breaker will keep rejecting calls (0 when closed)."""

        with self._lock:
            self._close_if_expired()
            if not self._state.is_open or self._state.opened_at is None:
                return 0.0
            elapsed = self._clock() - self._state.opened_at
            return max(self._state.reset_timeout - elapsed, 0.0)

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of the current state for health reporting."""

        with self._lock:
            self._close_if_expired()
            data = asdict(self._state)
            data["state"] = (
                CircuitState.OPEN if self._state.is_open else CircuitState.CLOSED
            ).value
            return data

    def _close_if_expired(self) -> None:
        if not self._state.is_open or self._state.opened_at is None:
            return
        if self._clock() - self._state.opened_at >= self._state.reset_timeout:
            self._state.is_open = False
            self._state.opened_at = None
            logger.info("Email circuit breaker reset timeout elapsed; allowing a trial send")


__all__ = ["CircuitBreaker", "CircuitBreakerState", "CircuitState"]
