"""Bounded retries around :meth:`EmailDispatcher.send`."""

from __future__ import annotations

import logging
import time
from typing import Callable

from budget_notifier.infrastructure.email_dispatcher import EmailDispatcher, EmailSendResult
from budget_notifier.infrastructure.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def send_with_retry(
    dispatcher: EmailDispatcher,
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
    *,
    user_id: int | None = None,
    email_type: str = "generic",
    attempts: int = 3,
    base_delay_seconds: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    limiter: SlidingWindowRateLimiter | None = None,
) -> EmailSendResult:
    """Send an email, retrying transient failures with exponential backoff.

    Attempt ``n`` (zero based) waits ``base_delay_seconds * 2 ** (n - 1)``
    before sending. Retrying stops on success, on a failure classified as
    permanent and when the circuit breaker rejects the send. When a
    ``limiter`` is given every attempt acquires its own slot.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    result: EmailSendResult | None = None
    for attempt in range(attempts):
        if attempt:
            delay = base_delay_seconds * 2 ** (attempt - 1)
            logger.info(
                "Retrying %s email to %s in %.1fs (attempt %s of %s)",
                email_type,
                to,
                delay,
                attempt + 1,
                attempts,
            )
            sleep(delay)

        if limiter is not None:
            limiter.acquire()
        result = dispatcher.send(
            to,
            subject,
            html,
            text,
            user_id=user_id,
            email_type=email_type,
            retry_count=attempt,
        )
        if result.success or result.circuit_open or not result.retryable:
            return result

    logger.warning("Giving up on %s email to %s after %s attempts", email_type, to, attempts)
    return result


__all__ = ["send_with_retry"]
