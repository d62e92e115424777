"""Fault tolerant email delivery built on top of an :class:`EmailProvider`."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budget_notifier.config import Settings, get_settings
from budget_notifier.domain.entities import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DeliveryAttempt,
)
from budget_notifier.infrastructure.circuit_breaker import CircuitBreaker
from budget_notifier.infrastructure.email import (
    EmailMessage,
    EmailProvider,
    SendGridEmailProvider,
    strip_html,
)
from budget_notifier.infrastructure.repositories import EmailDeliveryLogRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REASON_INVALID_RECIPIENT = "invalid_recipient"
REASON_INVALID_MESSAGE = "invalid_message"
REASON_EMAIL_DISABLED = "email_disabled"
REASON_CIRCUIT_OPEN = "circuit_breaker_open"
REASON_PROVIDER_ERROR = "provider_error"


@dataclass
class EmailSendResult:
    """Outcome of a single :meth:`EmailDispatcher.send` call."""

    success: bool
    message_id: str | None = None
    error: str | None = None
    retryable: bool | None = None
    reason: str | None = None

    @property
    def circuit_open(self) -> bool:
        return self.reason == REASON_CIRCUIT_OPEN


def is_valid_email(address: str | None) -> bool:
    """Return ``True`` when ``address`` looks like a deliverable address."""

    return bool(address) and EMAIL_PATTERN.match(address.strip()) is not None


def classify_provider_error(exc: Exception) -> bool:
    """Return ``True`` when a later retry of the failed send may succeed.

    Rate limiting and 5xx responses are transient; other 4xx responses and
    configuration problems are permanent. Errors without a status code are
    transport failures and count as transient.
    """

    status_code = getattr(exc, "status_code", None)
    message = str(exc).lower()
    if status_code == 429 or "rate limit" in message:
        return True
    if isinstance(status_code, int):
        if 500 <= status_code < 600:
            return True
        if 400 <= status_code < 500:
            return False
    if "invalid" in message:
        return False
    return True


class EmailDispatcher:
    """Send single emails through a circuit breaker and record every attempt.

    The breaker and the in-memory counters are shared by every caller of the
    instance, so both are guarded by locks.
    """

    def __init__(
        self,
        provider: EmailProvider | None,
        session_factory: Callable[[], Session],
        *,
        settings: Settings,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self._provider = provider
        self._session_factory = session_factory
        self._settings = settings
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            reset_timeout=settings.circuit_breaker_reset_timeout_seconds,
        )
        self._counters_lock = threading.Lock()
        self._sent = 0
        self._failed = 0
        self._rejected = 0

    @property
    def enabled(self) -> bool:
        return self._settings.email_enabled and self._provider is not None

    def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        *,
        user_id: int | None = None,
        email_type: str = "generic",
        retry_count: int = 0,
    ) -> EmailSendResult:
        """Send one email and return a structured result; never raises for provider errors."""

        if not is_valid_email(to):
            logger.warning("Rejected email with invalid recipient %r (user %s)", to, user_id)
            return EmailSendResult(
                success=False,
                error="Invalid email format",
                retryable=False,
                reason=REASON_INVALID_RECIPIENT,
            )
        if not subject or not html:
            return EmailSendResult(
                success=False,
                error="Missing required email fields: subject, html",
                retryable=False,
                reason=REASON_INVALID_MESSAGE,
            )

        if not self.enabled:
            logger.info("Email service is disabled; skipping %s email to %s", email_type, to)
            return EmailSendResult(
                success=False,
                error="Email service is disabled",
                retryable=False,
                reason=REASON_EMAIL_DISABLED,
            )

        if not self.breaker.allow_request():
            with self._counters_lock:
                self._rejected += 1
            logger.warning(
                "Circuit breaker open; %s email to %s not attempted", email_type, to
            )
            return EmailSendResult(
                success=False,
                error="Circuit breaker is open",
                retryable=None,
                reason=REASON_CIRCUIT_OPEN,
            )

        to = to.strip()
        message = EmailMessage(
            from_address=self._settings.email_from_address,
            from_name=self._settings.email_from_name,
            to=to,
            subject=subject,
            html=html,
            text=text or strip_html(html),
        )

        session = self._session_factory()
        try:
            repository = EmailDeliveryLogRepository(session)
            attempt_id = self._log_queued(
                session,
                repository,
                DeliveryAttempt(
                    id=None,
                    user_id=user_id,
                    email_type=email_type,
                    recipient_email=to,
                    subject=subject,
                    status=DELIVERY_STATUS_QUEUED,
                    retry_count=retry_count,
                ),
            )

            try:
                message_id = self._provider.send(message)
            except Exception as exc:
                retryable = classify_provider_error(exc)
                error = str(exc) or exc.__class__.__name__
                self.breaker.record_failure()
                with self._counters_lock:
                    self._failed += 1
                logger.error(
                    "Failed to send %s email to %s (retryable=%s): %s",
                    email_type,
                    to,
                    retryable,
                    error,
                )
                self._log_status(
                    session,
                    repository,
                    attempt_id,
                    DELIVERY_STATUS_FAILED,
                    error_message=error,
                )
                return EmailSendResult(
                    success=False,
                    error=error,
                    retryable=retryable,
                    reason=REASON_PROVIDER_ERROR,
                )

            self.breaker.record_success()
            with self._counters_lock:
                self._sent += 1
            logger.info("Email sent to %s (%s), message id %s", to, email_type, message_id)
            self._log_status(
                session,
                repository,
                attempt_id,
                DELIVERY_STATUS_SENT,
                provider_message_id=message_id or None,
            )
            return EmailSendResult(success=True, message_id=message_id or None)
        finally:
            session.close()

    @staticmethod
    def _log_queued(
        session: Session,
        repository: EmailDeliveryLogRepository,
        attempt: DeliveryAttempt,
    ) -> int | None:
        try:
            return repository.create(attempt).id
        except SQLAlchemyError:
            session.rollback()
            logger.exception(
                "Could not record %s email to %s in the delivery log",
                attempt.email_type,
                attempt.recipient_email,
            )
            return None

    @staticmethod
    def _log_status(
        session: Session,
        repository: EmailDeliveryLogRepository,
        attempt_id: int | None,
        status: str,
        **fields: Any,
    ) -> None:
        # The send outcome stands even when the log cannot be updated.
        if attempt_id is None:
            return
        try:
            repository.update_status(attempt_id, status, **fields)
        except SQLAlchemyError:
            session.rollback()
            logger.exception(
                "Could not mark delivery attempt %s as %s", attempt_id, status
            )

    def get_stats(self) -> dict[str, Any]:
        with self._counters_lock:
            counters = {"sent": self._sent, "failed": self._failed, "rejected": self._rejected}
        return {
            "enabled": self.enabled,
            **counters,
            "config": {
                "from_address": self._settings.email_from_address,
                "from_name": self._settings.email_from_name,
                "batch_size": self._settings.email_batch_size,
                "rate_limit_per_minute": self._settings.email_rate_limit_per_minute,
                "retry_attempts": self._settings.email_retry_attempts,
                "retry_delay_ms": self._settings.email_retry_delay_ms,
            },
            "circuit_breaker": self.breaker.snapshot(),
        }

    def reset_stats(self) -> None:
        with self._counters_lock:
            self._sent = 0
            self._failed = 0
            self._rejected = 0

    def health_check(self) -> dict[str, Any]:
        breaker = self.breaker.snapshot()
        if not self.enabled:
            status = "disabled"
        elif breaker["is_open"]:
            status = "degraded"
        else:
            status = "healthy"
        return {
            "status": status,
            "enabled": self.enabled,
            "provider_configured": self._provider is not None,
            "circuit_breaker": breaker,
        }


def build_email_dispatcher(
    settings: Settings, session_factory: Callable[[], Session]
) -> EmailDispatcher:
    """Create a dispatcher wired to SendGrid when an API key is configured."""

    provider: EmailProvider | None = None
    if settings.sendgrid_api_key:
        provider = SendGridEmailProvider(settings.sendgrid_api_key)
    elif settings.email_enabled:  # pragma: no cover - rejected by settings validation
        logger.warning("SendGrid API key not configured; email delivery disabled")
    return EmailDispatcher(provider, session_factory, settings=settings)


@lru_cache
def get_email_dispatcher() -> EmailDispatcher:
    """Return the process-wide dispatcher instance."""

    from budget_notifier.infrastructure.database import SessionLocal

    return build_email_dispatcher(get_settings(), SessionLocal)


__all__ = [
    "EmailDispatcher",
    "EmailSendResult",
    "REASON_CIRCUIT_OPEN",
    "REASON_EMAIL_DISABLED",
    "REASON_INVALID_MESSAGE",
    "REASON_INVALID_RECIPIENT",
    "REASON_PROVIDER_ERROR",
    "build_email_dispatcher",
    "classify_provider_error",
    "get_email_dispatcher",
    "is_valid_email",
]
