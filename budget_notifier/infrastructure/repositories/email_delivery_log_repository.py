"""Append-only persistence for email delivery attempts."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from budget_notifier.domain.entities import (
    DELIVERY_STATUS_BOUNCED,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DeliveryAttempt,
    DeliveryStats,
    DeliveryTypeStats,
)
from budget_notifier.domain.entities.delivery_attempt import (
    ALLOWED_STATUS_TRANSITIONS,
    DELIVERY_STATUSES,
)
from budget_notifier.infrastructure.models import EmailDeliveryLogModel
from budget_notifier.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


def _status_count(status: str):
    return func.coalesce(
        func.sum(case((EmailDeliveryLogModel.status == status, 1), else_=0)), 0
    )


class EmailDeliveryLogRepository:
    """Record delivery attempts and answer aggregate questions about them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        if attempt.status not in DELIVERY_STATUSES:
            msg = f"Unknown delivery status: {attempt.status}"
            raise ValueError(msg)
        now = now_in_app_timezone()
        model = EmailDeliveryLogModel(
            user_id=attempt.user_id,
            email_type=attempt.email_type,
            recipient_email=attempt.recipient_email,
            subject=attempt.subject,
            status=attempt.status,
            provider_message_id=attempt.provider_message_id,
            error_message=attempt.error_message,
            retry_count=attempt.retry_count,
            sent_at=ensure_app_naive_datetime(now) if attempt.status == DELIVERY_STATUS_SENT else None,
            created_at=ensure_app_naive_datetime(attempt.created_at or now),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_status(
        self,
        attempt_id: int,
        status: str,
        *,
        error_message: str | None = None,
        provider_message_id: str | None = None,
    ) -> DeliveryAttempt:
        """Resolve a queued attempt as sent or failed.

        Raises ``ValueError`` for unknown ids and for attempts that already
        left the ``queued`` status.
        """

        model = self.session.get(EmailDeliveryLogModel, attempt_id)
        if model is None:
            msg = f"Delivery attempt with id {attempt_id} not found"
            raise ValueError(msg)
        allowed = ALLOWED_STATUS_TRANSITIONS.get(model.status, frozenset())
        if status not in allowed:
            msg = f"Cannot change delivery attempt {attempt_id} from {model.status} to {status}"
            raise ValueError(msg)

        model.status = status
        if error_message is not None:
            model.error_message = error_message
        if provider_message_id is not None:
            model.provider_message_id = provider_message_id
        if status == DELIVERY_STATUS_SENT:
            model.sent_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(self, user_id: int, *, limit: int = 50) -> Sequence[DeliveryAttempt]:
        query = (
            self.session.query(EmailDeliveryLogModel)
            .filter(EmailDeliveryLogModel.user_id == user_id)
            .order_by(EmailDeliveryLogModel.created_at.desc(), EmailDeliveryLogModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def list_recent_failures(self, *, limit: int = 10) -> Sequence[DeliveryAttempt]:
        query = (
            self.session.query(EmailDeliveryLogModel)
            .filter(EmailDeliveryLogModel.status == DELIVERY_STATUS_FAILED)
            .order_by(EmailDeliveryLogModel.created_at.desc(), EmailDeliveryLogModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def get_stats(
        self,
        *,
        user_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> DeliveryStats:
        query = self.session.query(
            EmailDeliveryLogModel.email_type,
            func.count(EmailDeliveryLogModel.id),
            _status_count(DELIVERY_STATUS_SENT),
            _status_count(DELIVERY_STATUS_FAILED),
            _status_count(DELIVERY_STATUS_BOUNCED),
            _status_count(DELIVERY_STATUS_QUEUED),
        )
        if user_id is not None:
            query = query.filter(EmailDeliveryLogModel.user_id == user_id)
        if start is not None:
            query = query.filter(EmailDeliveryLogModel.created_at >= ensure_app_naive_datetime(start))
        if end is not None:
            query = query.filter(EmailDeliveryLogModel.created_at <= ensure_app_naive_datetime(end))
        query = query.group_by(EmailDeliveryLogModel.email_type).order_by(
            EmailDeliveryLogModel.email_type
        )

        stats = DeliveryStats()
        for email_type, total, sent, failed, bounced, queued in query.all():
            row = DeliveryTypeStats(
                email_type=email_type,
                total=int(total),
                sent=int(sent),
                failed=int(failed),
                bounced=int(bounced),
                queued=int(queued),
            )
            stats.by_type.append(row)
            stats.totals.total += row.total
            stats.totals.sent += row.sent
            stats.totals.failed += row.failed
            stats.totals.bounced += row.bounced
            stats.totals.queued += row.queued
        return stats

    @staticmethod
    def _to_entity(model: EmailDeliveryLogModel) -> DeliveryAttempt:
        return DeliveryAttempt(
            id=model.id,
            user_id=model.user_id,
            email_type=model.email_type,
            recipient_email=model.recipient_email,
            subject=model.subject,
            status=model.status,
            provider_message_id=model.provider_message_id,
            error_message=model.error_message,
            retry_count=model.retry_count or 0,
            sent_at=ensure_app_timezone(model.sent_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["EmailDeliveryLogRepository"]
