"""Tests for retrying email sends."""

from __future__ import annotations

import pytest

from budget_notifier.application.use_cases.emails import send_with_retry
from budget_notifier.infrastructure.email_dispatcher import (
    REASON_CIRCUIT_OPEN,
    REASON_PROVIDER_ERROR,
    EmailSendResult,
)
from budget_notifier.infrastructure.rate_limit import SlidingWindowRateLimiter


class ScriptedDispatcher:
    """Return queued results and remember the retry counts it was given."""

    def __init__(self, *results: EmailSendResult) -> None:
        self.results = list(results)
        self.retry_counts: list[int] = []

    def send(self, to, subject, html, text=None, *, user_id=None, email_type="generic", retry_count=0):
        self.retry_counts.append(retry_count)
        return self.results.pop(0)


def _transient() -> EmailSendResult:
    return EmailSendResult(success=False, error="503", retryable=True, reason=REASON_PROVIDER_ERROR)


def test_retries_transient_failures_with_exponential_backoff() -> None:
    dispatcher = ScriptedDispatcher(
        _transient(), _transient(), EmailSendResult(success=True, message_id="ok")
    )
    sleeps: list[float] = []

    result = send_with_retry(
        dispatcher,
        "user@example.com",
        "Konu",
        "<p>x</p>",
        attempts=3,
        base_delay_seconds=2.0,
        sleep=sleeps.append,
    )

    assert result.success is True
    assert dispatcher.retry_counts == [0, 1, 2]
    assert sleeps == [2.0, 4.0]


def test_stops_on_permanent_failure() -> None:
    permanent = EmailSendResult(
        success=False, error="400", retryable=False, reason=REASON_PROVIDER_ERROR
    )
    dispatcher = ScriptedDispatcher(permanent)
    sleeps: list[float] = []

    result = send_with_retry(dispatcher, "user@example.com", "Konu", "<p>x</p>", sleep=sleeps.append)

    assert result is permanent
    assert dispatcher.retry_counts == [0]
    assert sleeps == []


def test_stops_when_circuit_is_open() -> None:
    open_circuit = EmailSendResult(success=False, error="open", reason=REASON_CIRCUIT_OPEN)
    dispatcher = ScriptedDispatcher(_transient(), open_circuit)

    result = send_with_retry(
        dispatcher, "user@example.com", "Konu", "<p>x</p>", attempts=5, sleep=lambda _: None
    )

    assert result.circuit_open is True
    assert dispatcher.retry_counts == [0, 1]


def test_gives_up_after_the_last_attempt(caplog) -> None:
    dispatcher = ScriptedDispatcher(_transient(), _transient())

    with caplog.at_level("WARNING"):
        result = send_with_retry(
            dispatcher, "user@example.com", "Konu", "<p>x</p>", attempts=2, sleep=lambda _: None
        )

    assert result.success is False
    assert "Giving up" in caplog.text


def test_requires_at_least_one_attempt() -> None:
    with pytest.raises(ValueError):
        send_with_retry(ScriptedDispatcher(), "user@example.com", "Konu", "<p>x</p>", attempts=0)


def test_every_attempt_waits_for_the_rate_limiter() -> None:
    now = [0.0]
    limiter_waits: list[float] = []

    def wait(seconds: float) -> None:
        limiter_waits.append(seconds)
        now[0] += seconds

    limiter = SlidingWindowRateLimiter(1, 60.0, clock=lambda: now[0], sleep=wait)
    dispatcher = ScriptedDispatcher(_transient(), _transient(), _transient())

    result = send_with_retry(
        dispatcher,
        "user@example.com",
        "Konu",
        "<p>x</p>",
        attempts=3,
        sleep=lambda _: None,
        limiter=limiter,
    )

    assert result.success is False
    assert dispatcher.retry_counts == [0, 1, 2]
    assert limiter_waits == [60.0, 60.0]
