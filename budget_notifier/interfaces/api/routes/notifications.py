"""Routes for reading notifications and triggering the daily run."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from budget_notifier.application.use_cases.notifications import (
    DailyNotificationJob,
    DailyRunInProgressError,
)
from budget_notifier.domain.entities import Notification
from budget_notifier.infrastructure.repositories import NotificationRepository
from budget_notifier.interfaces.api.dependencies import get_db, get_notification_job
from budget_notifier.interfaces.api.schemas import (
    DailyRunRead,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.user_id,
        notification_type=notification.notification_type.value,
        title=notification.title,
        message=notification.message,
        priority=notification.priority,
        related_entity_id=notification.related_entity_id,
        related_entity_type=notification.related_entity_type,
        payload=notification.payload or {},
        created_at=notification.created_at,
        updated_at=notification.updated_at,
        is_read=notification.is_read,
    )


@router.get("/users/{user_id}", response_model=list[NotificationRead])
def list_user_notifications(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    """Return the open notifications of ``user_id``, newest first."""

    notifications = NotificationRepository(db).list_open_for_user(user_id, limit=limit)
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/read", response_model=NotificationMarkReadResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
) -> NotificationMarkReadResponse:
    updated = NotificationRepository(db).mark_as_read(
        payload.unique_ids(), user_id=payload.user_id
    )
    return NotificationMarkReadResponse(updated=updated)


@router.post("/{notification_id}/dismiss", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_notification(
    notification_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
) -> Response:
    """Dismiss a notification so the condition may be reported again."""

    if not NotificationRepository(db).dismiss(notification_id, user_id=user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/run", response_model=DailyRunRead)
def run_daily_notifications(
    force: bool = False,
    job: DailyNotificationJob = Depends(get_notification_job),
) -> DailyRunRead:
    """Run the daily notification batch now."""

    try:
        result = job.run(force=force)
    except DailyRunInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    if result is None:
        return DailyRunRead(executed=False, run_date=job.last_completed)
    return DailyRunRead(
        executed=True,
        run_date=result.run_date,
        users_processed=result.users_processed,
        notifications_created=result.notifications_created,
        notifications_updated=result.notifications_updated,
        notifications_skipped=result.notifications_skipped,
        errors=[asdict(error) for error in result.errors],
    )
