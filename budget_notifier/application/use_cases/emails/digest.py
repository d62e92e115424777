"""Emails summarizing the notifications produced by the daily run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Sequence

from sqlalchemy.orm import Session

from budget_notifier.config import Settings, get_settings
from budget_notifier.domain.entities import (
    PRIORITY_HIGH,
    Notification,
    User,
    payload_from_dict,
)
from budget_notifier.infrastructure.email_dispatcher import EmailDispatcher, EmailSendResult
from budget_notifier.infrastructure.rate_limit import SlidingWindowRateLimiter
from budget_notifier.infrastructure.repositories import (
    EmailPreferencesRepository,
    NotificationRepository,
    UserRepository,
)
from budget_notifier.utils import app_day_bounds, ensure_app_timezone, today_in_app_timezone

from .retry import send_with_retry
from .templates import (
    EMAIL_TYPE_CRITICAL_ALERT,
    EMAIL_TYPE_DAILY_DIGEST,
    EMAIL_TYPE_TEST,
    render_critical_alert,
    render_daily_digest,
    render_test_email,
)

logger = logging.getLogger(__name__)


@dataclass
class DigestRunResult:
    """Counters of a digest sweep.

    ``sent`` and ``failed`` count emails, ``skipped`` counts users who
    received nothing because they had no news or opted out.
    """

    sent: int = 0
    failed: int = 0
    skipped: int = 0
    aborted: bool = False


def _send(
    dispatcher: EmailDispatcher,
    user: User,
    subject: str,
    html: str,
    *,
    email_type: str,
    settings: Settings,
    sleep: Callable[[float], None],
    limiter: SlidingWindowRateLimiter | None = None,
) -> EmailSendResult:
    return send_with_retry(
        dispatcher,
        user.email,
        subject,
        html,
        user_id=user.id,
        email_type=email_type,
        attempts=settings.email_retry_attempts,
        base_delay_seconds=settings.email_retry_delay_ms / 1000,
        sleep=sleep,
        limiter=limiter,
    )


def _touched_today(session: Session, user_id: int, today: date) -> Sequence[Notification]:
    start, _ = app_day_bounds(today)
    return NotificationRepository(session).list_open_touched_since(
        user_id, ensure_app_timezone(start)
    )


def _is_critical(notification: Notification, today: date) -> bool:
    return (
        notification.priority == PRIORITY_HIGH
        and notification.notification_type.is_overdue
        and notification.escalated_at is not None
        and notification.escalated_at.date() == today
    )


def send_test_email(
    session: Session, dispatcher: EmailDispatcher, user_id: int
) -> EmailSendResult:
    """Send a single test email to ``user_id`` without retries."""

    user = UserRepository(session).get(user_id)
    if user is None:
        raise ValueError("User not found")

    rendered = render_test_email(user.name)
    return dispatcher.send(
        user.email,
        rendered.subject,
        rendered.html,
        user_id=user.id,
        email_type=EMAIL_TYPE_TEST,
    )


def send_daily_digest(
    session: Session,
    dispatcher: EmailDispatcher,
    user: User,
    *,
    today: date | None = None,
    settings: Settings | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> EmailSendResult | None:
    """Email ``user`` the open notifications created or refreshed today.

    Returns ``None`` without sending when the user disabled digests or has
    nothing new.
    """

    settings = settings or get_settings()
    today = today or today_in_app_timezone()

    preferences = EmailPreferencesRepository(session).get_or_default(user.id)
    if not preferences.allows_digest():
        logger.debug("User %s disabled the daily digest", user.id)
        return None

    notifications = _touched_today(session, user.id, today)
    if not notifications:
        return None

    rendered = render_daily_digest(user.name, notifications, today)
    return _send(
        dispatcher,
        user,
        rendered.subject,
        rendered.html,
        email_type=EMAIL_TYPE_DAILY_DIGEST,
        settings=settings,
        sleep=sleep,
        limiter=limiter,
    )


def send_critical_alert(
    dispatcher: EmailDispatcher,
    user: User,
    notification: Notification,
    *,
    settings: Settings | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> EmailSendResult:
    """Email ``user`` about a single high priority overdue notification."""

    settings = settings or get_settings()
    payload = payload_from_dict(notification.notification_type.value, notification.payload)
    rendered = render_critical_alert(user.name, notification, payload)
    return _send(
        dispatcher,
        user,
        rendered.subject,
        rendered.html,
        email_type=EMAIL_TYPE_CRITICAL_ALERT,
        settings=settings,
        sleep=sleep,
        limiter=limiter,
    )


def _record(result: DigestRunResult, outcome: EmailSendResult) -> None:
    if outcome.success:
        result.sent += 1
    else:
        result.failed += 1


def send_daily_digests(
    session_factory: Callable[[], Session],
    dispatcher: EmailDispatcher,
    *,
    today: date | None = None,
    settings: Settings | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> DigestRunResult:
    """Send critical alerts and the daily digest to every active user.

    Users are loaded in pages of ``EMAIL_BATCH_SIZE`` and every send attempt,
    retries included, waits for the rate limiter. A failure for one user is
    logged and the sweep continues; the sweep stops as soon as the circuit
    breaker rejects a send.
    """

    settings = settings or get_settings()
    today = today or today_in_app_timezone()
    limiter = limiter or SlidingWindowRateLimiter(settings.email_rate_limit_per_minute, 60.0)
    result = DigestRunResult()

    if not dispatcher.enabled:
        logger.info("Email delivery disabled; skipping daily digests for %s", today)
        return result

    batch_size = settings.email_batch_size
    session = session_factory()
    try:
        users_repository = UserRepository(session)
        preferences_repository = EmailPreferencesRepository(session)
        offset = 0
        while True:
            users = users_repository.list_active(skip=offset, limit=batch_size)
            for user in users:
                try:
                    preferences = preferences_repository.get_or_default(user.id)
                    notifications = _touched_today(session, user.id, today)

                    outcomes: list[EmailSendResult] = []
                    if preferences.allows_critical_alerts():
                        for notification in notifications:
                            if not _is_critical(notification, today):
                                continue
                            outcomes.append(
                                send_critical_alert(
                                    dispatcher,
                                    user,
                                    notification,
                                    settings=settings,
                                    sleep=sleep,
                                    limiter=limiter,
                                )
                            )
                            if outcomes[-1].circuit_open:
                                break

                    if (
                        notifications
                        and preferences.allows_digest()
                        and not any(outcome.circuit_open for outcome in outcomes)
                    ):
                        rendered = render_daily_digest(user.name, notifications, today)
                        outcomes.append(
                            _send(
                                dispatcher,
                                user,
                                rendered.subject,
                                rendered.html,
                                email_type=EMAIL_TYPE_DAILY_DIGEST,
                                settings=settings,
                                sleep=sleep,
                                limiter=limiter,
                            )
                        )
                except Exception:
                    session.rollback()
                    logger.exception("Failed to send daily emails to user %s", user.id)
                    result.failed += 1
                    continue

                if not outcomes:
                    result.skipped += 1
                for outcome in outcomes:
                    if outcome.circuit_open:
                        result.aborted = True
                    else:
                        _record(result, outcome)
                if result.aborted:
                    logger.warning(
                        "Circuit breaker open; stopping daily digests at user %s", user.id
                    )
                    return result

            if len(users) < batch_size:
                break
            offset += batch_size
    finally:
        session.close()

    logger.info(
        "Daily digests for %s: %s sent, %s failed, %s skipped",
        today,
        result.sent,
        result.failed,
        result.skipped,
    )
    return result


__all__ = [
    "DigestRunResult",
    "send_critical_alert",
    "send_daily_digest",
    "send_daily_digests",
    "send_test_email",
]
