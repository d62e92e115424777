"""Tests for the circuit-breaking email dispatcher."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from budget_notifier.domain.entities import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
)
from budget_notifier.infrastructure.circuit_breaker import CircuitBreaker
from budget_notifier.infrastructure.email import EmailProviderError
from budget_notifier.infrastructure.email_dispatcher import (
    REASON_CIRCUIT_OPEN,
    REASON_EMAIL_DISABLED,
    REASON_INVALID_MESSAGE,
    REASON_INVALID_RECIPIENT,
    REASON_PROVIDER_ERROR,
    EmailDispatcher,
    build_email_dispatcher,
    classify_provider_error,
    is_valid_email,
)
from budget_notifier.infrastructure.repositories import EmailDeliveryLogRepository


class FakeProvider:
    """Provider returning message ids or raising queued errors."""

    def __init__(self, *errors: Exception | None) -> None:
        self.errors = list(errors)
        self.messages = []

    def send(self, message) -> str:
        self.messages.append(message)
        error = self.errors.pop(0) if self.errors else None
        if error is not None:
            raise error
        return f"msg-{len(self.messages)}"


def _dispatcher(session_factory, settings, provider, **kwargs) -> EmailDispatcher:
    return EmailDispatcher(provider, session_factory, settings=settings, **kwargs)


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("user@example.com", True),
        (" user@example.com ", True),
        ("user@example", False),
        ("not-an-email", False),
        ("two words@example.com", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(address, expected) -> None:
    assert is_valid_email(address) is expected


@pytest.mark.parametrize(
    ("error", "retryable"),
    [
        (EmailProviderError("Too many requests", status_code=429), True),
        (EmailProviderError("Service unavailable", status_code=503), True),
        (EmailProviderError("Bad request", status_code=400), False),
        (EmailProviderError("Forbidden", status_code=403), False),
        (RuntimeError("rate limit exceeded"), True),
        (ValueError("invalid api key"), False),
        (ConnectionError("connection reset"), True),
    ],
)
def test_classify_provider_error(error, retryable) -> None:
    assert classify_provider_error(error) is retryable


def test_successful_send_is_logged_as_sent(session_factory, settings, session) -> None:
    provider = FakeProvider()
    dispatcher = _dispatcher(session_factory, settings, provider)

    result = dispatcher.send(
        "user@example.com",
        "Konu",
        "<p>Merhaba <b>dünya</b></p>",
        user_id=5,
        email_type="daily_digest",
    )

    assert result.success is True
    assert result.message_id == "msg-1"
    assert provider.messages[0].text == "Merhaba dünya"
    assert provider.messages[0].from_address == "notifications@example.com"

    [attempt] = EmailDeliveryLogRepository(session).list_for_user(5)
    assert attempt.status == DELIVERY_STATUS_SENT
    assert attempt.provider_message_id == "msg-1"
    assert attempt.email_type == "daily_digest"
    assert attempt.sent_at is not None
    assert dispatcher.get_stats()["sent"] == 1


def test_provider_failure_is_classified_and_logged(session_factory, settings, session) -> None:
    provider = FakeProvider(EmailProviderError("Service unavailable", status_code=503))
    dispatcher = _dispatcher(session_factory, settings, provider)

    result = dispatcher.send("user@example.com", "Konu", "<p>x</p>", user_id=5, retry_count=2)

    assert result.success is False
    assert result.retryable is True
    assert result.reason == REASON_PROVIDER_ERROR
    assert result.error == "Service unavailable"

    [attempt] = EmailDeliveryLogRepository(session).list_for_user(5)
    assert attempt.status == DELIVERY_STATUS_FAILED
    assert attempt.error_message == "Service unavailable"
    assert attempt.retry_count == 2
    assert dispatcher.breaker.consecutive_failures == 1
    assert dispatcher.get_stats()["failed"] == 1


def _commits_fail_after(session_factory, allowed: int):
    """Return a session factory whose commits fail once ``allowed`` succeeded."""

    commits = []

    def factory():
        db = session_factory()
        real_commit = db.commit

        def commit() -> None:
            commits.append(None)
            if len(commits) > allowed:
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            real_commit()

        db.commit = commit
        return db

    return factory


def test_delivered_email_reports_success_when_log_update_fails(
    session_factory, settings, session, caplog
) -> None:
    provider = FakeProvider()
    dispatcher = _dispatcher(_commits_fail_after(session_factory, 1), settings, provider)

    with caplog.at_level("ERROR"):
        result = dispatcher.send("user@example.com", "Konu", "<p>x</p>", user_id=5)

    assert result.success is True
    assert result.message_id == "msg-1"
    assert dispatcher.breaker.consecutive_failures == 0
    assert dispatcher.get_stats()["sent"] == 1
    assert "Could not mark delivery attempt" in caplog.text
    [attempt] = EmailDeliveryLogRepository(session).list_for_user(5)
    assert attempt.status == DELIVERY_STATUS_QUEUED


def test_email_is_sent_when_the_delivery_log_is_unavailable(
    session_factory, settings, session, caplog
) -> None:
    provider = FakeProvider()
    dispatcher = _dispatcher(_commits_fail_after(session_factory, 0), settings, provider)

    with caplog.at_level("ERROR"):
        result = dispatcher.send("user@example.com", "Konu", "<p>x</p>", user_id=5)

    assert result.success is True
    assert len(provider.messages) == 1
    assert "Could not record" in caplog.text
    assert EmailDeliveryLogRepository(session).list_for_user(5) == []


def test_invalid_recipient_fails_fast(session_factory, settings, session) -> None:
    provider = FakeProvider()
    dispatcher = _dispatcher(session_factory, settings, provider)

    result = dispatcher.send("broken-address", "Konu", "<p>x</p>", user_id=5)

    assert result.success is False
    assert result.retryable is False
    assert result.reason == REASON_INVALID_RECIPIENT
    assert provider.messages == []
    assert dispatcher.breaker.consecutive_failures == 0
    assert EmailDeliveryLogRepository(session).list_for_user(5) == []


def test_missing_subject_is_rejected(session_factory, settings) -> None:
    dispatcher = _dispatcher(session_factory, settings, FakeProvider())

    result = dispatcher.send("user@example.com", "", "<p>x</p>")

    assert result.reason == REASON_INVALID_MESSAGE


def test_disabled_dispatcher_does_not_call_provider(session_factory, settings) -> None:
    provider = FakeProvider()
    disabled = settings.model_copy(update={"email_enabled": False})
    dispatcher = _dispatcher(session_factory, disabled, provider)

    result = dispatcher.send("user@example.com", "Konu", "<p>x</p>")

    assert result.reason == REASON_EMAIL_DISABLED
    assert provider.messages == []
    assert dispatcher.health_check()["status"] == "disabled"


def test_open_circuit_short_circuits_sends(session_factory, settings, session) -> None:
    errors = [EmailProviderError("Bad gateway", status_code=502) for _ in range(10)]
    provider = FakeProvider(*errors)
    dispatcher = _dispatcher(
        session_factory,
        settings,
        provider,
        breaker=CircuitBreaker(failure_threshold=10, reset_timeout=300),
    )

    for _ in range(10):
        assert dispatcher.send("user@example.com", "Konu", "<p>x</p>", user_id=1).success is False

    result = dispatcher.send("user@example.com", "Konu", "<p>x</p>", user_id=1)

    assert result.reason == REASON_CIRCUIT_OPEN
    assert result.circuit_open is True
    assert len(provider.messages) == 10
    assert len(EmailDeliveryLogRepository(session).list_for_user(1)) == 10
    stats = dispatcher.get_stats()
    assert stats["failed"] == 10
    assert stats["rejected"] == 1
    assert stats["circuit_breaker"]["is_open"] is True
    assert dispatcher.health_check()["status"] == "degraded"


def test_non_retryable_failures_also_count_toward_the_breaker(session_factory, settings) -> None:
    provider = FakeProvider(*(EmailProviderError("Bad request", status_code=400) for _ in range(2)))
    dispatcher = _dispatcher(
        session_factory,
        settings,
        provider,
        breaker=CircuitBreaker(failure_threshold=2, reset_timeout=300),
    )

    dispatcher.send("user@example.com", "Konu", "<p>x</p>")
    dispatcher.send("user@example.com", "Konu", "<p>x</p>")

    assert dispatcher.send("user@example.com", "Konu", "<p>x</p>").circuit_open


def test_reset_stats(session_factory, settings) -> None:
    dispatcher = _dispatcher(session_factory, settings, FakeProvider())
    dispatcher.send("user@example.com", "Konu", "<p>x</p>")

    dispatcher.reset_stats()

    stats = dispatcher.get_stats()
    assert (stats["sent"], stats["failed"], stats["rejected"]) == (0, 0, 0)
    assert stats["config"]["batch_size"] == settings.email_batch_size
    assert dispatcher.health_check()["status"] == "healthy"


def test_build_email_dispatcher_uses_sendgrid_when_configured(session_factory, settings) -> None:
    dispatcher = build_email_dispatcher(settings, session_factory)

    assert dispatcher.enabled is True
    assert dispatcher.health_check()["provider_configured"] is True
    assert dispatcher.breaker.failure_threshold == settings.circuit_breaker_failure_threshold
