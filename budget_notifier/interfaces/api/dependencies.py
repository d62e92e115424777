"""FastAPI dependency utilities."""

from fastapi import HTTPException, status

from budget_notifier.application.use_cases.notifications import (
    DailyNotificationJob,
    get_daily_notification_job,
)
from budget_notifier.infrastructure.database import get_db
from budget_notifier.infrastructure.email_dispatcher import (
    EmailDispatcher,
    get_email_dispatcher,
)


def get_dispatcher() -> EmailDispatcher:
    """Return the shared :class:`EmailDispatcher`."""

    try:
        return get_email_dispatcher()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


def get_notification_job() -> DailyNotificationJob:
    """Return the shared daily notification job."""

    return get_daily_notification_job()


__all__ = ["get_db", "get_dispatcher", "get_notification_job"]
