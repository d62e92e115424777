"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from budget_notifier.domain.entities import Notification, NotificationType
from budget_notifier.infrastructure.models import NotificationModel
from budget_notifier.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_open_for_user(
        self,
        user_id: int,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_dismissed.is_(False))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_open_touched_since(
        self, user_id: int, since: datetime
    ) -> Sequence[Notification]:
        """Return open notifications created or refreshed at or after ``since``."""

        naive_since = ensure_app_naive_datetime(since)
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_dismissed.is_(False))
            .filter(
                or_(
                    NotificationModel.created_at >= naive_since,
                    NotificationModel.updated_at >= naive_since,
                )
            )
            .order_by(NotificationModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def find_open_by_dedup_key(self, dedup_key: str) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.dedup_key == dedup_key)
            .filter(NotificationModel.is_dismissed.is_(False))
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification, include_creation_fields=True)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, notification: Notification) -> Notification:
        if notification.id is None:
            raise ValueError("Notification id is required for updates")
        model = self.session.get(NotificationModel, notification.id)
        if model is None:
            msg = f"Notification with id {notification.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, notification, include_creation_fields=False)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_ids: Iterable[int], *, user_id: int) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def dismiss(self, notification_id: int, *, user_id: int) -> bool:
        """Dismiss a notification, releasing its duplicate-detection key.

        Returns ``False`` when the notification does not belong to the user.
        """

        model = self.session.get(NotificationModel, notification_id)
        if model is None or model.user_id != user_id:
            return False
        model.is_dismissed = True
        model.dedup_key = None
        model.updated_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        return True

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel,
        notification: Notification,
        *,
        include_creation_fields: bool,
    ) -> None:
        if include_creation_fields:
            model.created_at = (
                ensure_app_naive_datetime(notification.created_at)
                or ensure_app_naive_datetime(now_in_app_timezone())
            )
            model.user_id = notification.user_id
            model.notification_type = NotificationType(notification.notification_type).value
            model.related_entity_id = notification.related_entity_id
            model.related_entity_type = notification.related_entity_type
        model.title = notification.title
        model.message = notification.message
        model.priority = notification.priority
        model.payload = dict(notification.payload or {})
        model.updated_at = ensure_app_naive_datetime(notification.updated_at)
        model.is_read = notification.is_read
        model.is_dismissed = notification.is_dismissed
        model.dedup_key = None if notification.is_dismissed else notification.dedup_key
        model.escalated_at = ensure_app_naive_datetime(notification.escalated_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            notification_type=NotificationType(model.notification_type),
            title=model.title,
            message=model.message,
            priority=model.priority,
            related_entity_id=model.related_entity_id,
            related_entity_type=model.related_entity_type,
            payload=model.payload or {},
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            is_read=bool(model.is_read),
            is_dismissed=bool(model.is_dismissed),
            dedup_key=model.dedup_key,
            escalated_at=ensure_app_timezone(model.escalated_at),
        )


__all__ = ["NotificationRepository"]
