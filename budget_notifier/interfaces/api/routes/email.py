"""Operational endpoints of the email delivery pipeline."""

from __future__ import annotations

from dataclasses import asdict, replace
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from budget_notifier.application.use_cases.emails import send_test_email
from budget_notifier.domain.entities import DeliveryAttempt
from budget_notifier.infrastructure.email_dispatcher import EmailDispatcher
from budget_notifier.infrastructure.repositories import (
    EmailDeliveryLogRepository,
    EmailPreferencesRepository,
    UserRepository,
)
from budget_notifier.interfaces.api.dependencies import get_db, get_dispatcher
from budget_notifier.interfaces.api.schemas import (
    DeliveryAttemptRead,
    DeliveryStatsRead,
    EmailHealthRead,
    EmailPreferencesRead,
    EmailPreferencesUpdate,
    EmailSendResultRead,
    EmailStatsRead,
    SendTestEmailRequest,
)

router = APIRouter(prefix="/email", tags=["email"])


def _attempt_to_schema(attempt: DeliveryAttempt) -> DeliveryAttemptRead:
    return DeliveryAttemptRead.model_validate(asdict(attempt))


@router.get("/health", response_model=EmailHealthRead)
def email_health(dispatcher: EmailDispatcher = Depends(get_dispatcher)) -> EmailHealthRead:
    return EmailHealthRead(**dispatcher.health_check())


@router.get("/stats", response_model=EmailStatsRead)
def email_stats(dispatcher: EmailDispatcher = Depends(get_dispatcher)) -> EmailStatsRead:
    """Return the in-memory counters of this process."""

    return EmailStatsRead(**dispatcher.get_stats())


@router.post("/stats/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset_email_stats(dispatcher: EmailDispatcher = Depends(get_dispatcher)) -> Response:
    dispatcher.reset_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/metrics", response_model=DeliveryStatsRead)
def email_metrics(
    user_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
) -> DeliveryStatsRead:
    """Aggregate the persisted delivery log, optionally per user and period."""

    stats = EmailDeliveryLogRepository(db).get_stats(user_id=user_id, start=start, end=end)
    return DeliveryStatsRead(
        totals=asdict(stats.totals),
        by_type=[asdict(item) for item in stats.by_type],
        success_rate=stats.success_rate,
    )


@router.get("/delivery-logs/{user_id}", response_model=list[DeliveryAttemptRead])
def list_delivery_logs(
    user_id: int,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[DeliveryAttemptRead]:
    attempts = EmailDeliveryLogRepository(db).list_for_user(user_id, limit=limit)
    return [_attempt_to_schema(attempt) for attempt in attempts]


@router.get("/failures", response_model=list[DeliveryAttemptRead])
def list_recent_failures(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[DeliveryAttemptRead]:
    attempts = EmailDeliveryLogRepository(db).list_recent_failures(limit=limit)
    return [_attempt_to_schema(attempt) for attempt in attempts]


@router.post("/test", response_model=EmailSendResultRead)
def send_test(
    payload: SendTestEmailRequest,
    db: Session = Depends(get_db),
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
) -> EmailSendResultRead:
    """Send a test email to the given user."""

    try:
        result = send_test_email(db, dispatcher, payload.user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return EmailSendResultRead(**asdict(result))


def _ensure_user_exists(db: Session, user_id: int) -> None:
    if UserRepository(db).get(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("/preferences/{user_id}", response_model=EmailPreferencesRead)
def get_email_preferences(user_id: int, db: Session = Depends(get_db)) -> EmailPreferencesRead:
    """Return the user's email switches, defaulting to everything enabled."""

    _ensure_user_exists(db, user_id)
    preferences = EmailPreferencesRepository(db).get_or_default(user_id)
    return EmailPreferencesRead(**asdict(preferences))


@router.put("/preferences/{user_id}", response_model=EmailPreferencesRead)
def update_email_preferences(
    user_id: int,
    payload: EmailPreferencesUpdate,
    db: Session = Depends(get_db),
) -> EmailPreferencesRead:
    _ensure_user_exists(db, user_id)
    repository = EmailPreferencesRepository(db)
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    preferences = repository.save(replace(repository.get_or_default(user_id), **changes))
    return EmailPreferencesRead(**asdict(preferences))
