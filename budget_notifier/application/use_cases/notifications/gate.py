"""Persistence of notification candidates with duplicate suppression."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from budget_notifier.domain.entities import PRIORITY_HIGH, Notification, NotificationCandidate
from budget_notifier.infrastructure.repositories import NotificationRepository
from budget_notifier.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)


class AdmissionOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass
class AdmissionResult:
    outcome: AdmissionOutcome
    notification: Notification | None


def build_dedup_key(candidate: NotificationCandidate, day: date) -> str:
    """Return the uniqueness key of ``candidate`` on ``day``.

    Overdue conditions are tracked for as long as they last, so their key
    does not include the date and at most one open notification exists per
    overdue entity.
    """

    base = f"{candidate.user_id}:{candidate.notification_type.value}:{candidate.subject}"
    if candidate.notification_type.is_overdue:
        return base
    return f"{base}:{day.isoformat()}"


class NotificationGate:
    """Admit candidates, creating, refreshing or skipping them.

    Reminders and budget alerts are stored at most once per user, entity and
    day. Overdue notifications are refreshed in place while they remain open.
    A unique ``dedup_key`` column rejects the insert if a concurrent writer
    stored the same notification between the lookup and the insert.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.repository = NotificationRepository(session)

    def admit(
        self, candidate: NotificationCandidate, *, now: datetime | None = None
    ) -> AdmissionResult:
        now = ensure_app_timezone(now) or now_in_app_timezone()
        dedup_key = build_dedup_key(candidate, now.date())

        existing = self.repository.find_open_by_dedup_key(dedup_key)
        if existing is not None:
            return self._resolve_existing(existing, candidate, now)

        notification = Notification(
            id=None,
            user_id=candidate.user_id,
            notification_type=candidate.notification_type,
            title=candidate.title,
            message=candidate.message,
            priority=candidate.priority,
            related_entity_id=candidate.related_entity_id,
            related_entity_type=candidate.related_entity_type,
            payload=candidate.payload.to_dict(),
            created_at=now,
            dedup_key=dedup_key,
            escalated_at=now if candidate.priority == PRIORITY_HIGH else None,
        )
        try:
            created = self.repository.create(notification)
        except IntegrityError:
            self.session.rollback()
            logger.info("Notification %s was stored concurrently", dedup_key)
            existing = self.repository.find_open_by_dedup_key(dedup_key)
            if existing is None:
                raise
            return self._resolve_existing(existing, candidate, now)

        logger.debug("Created notification %s (%s)", created.id, dedup_key)
        return AdmissionResult(AdmissionOutcome.CREATED, created)

    def _resolve_existing(
        self,
        existing: Notification,
        candidate: NotificationCandidate,
        now: datetime,
    ) -> AdmissionResult:
        if not candidate.notification_type.is_overdue:
            return AdmissionResult(AdmissionOutcome.SKIPPED, existing)

        if candidate.priority != PRIORITY_HIGH:
            escalated_at = None
        elif existing.priority == PRIORITY_HIGH and existing.escalated_at is not None:
            escalated_at = existing.escalated_at
        else:
            escalated_at = now

        refreshed = replace(
            existing,
            title=candidate.title,
            message=candidate.message,
            priority=candidate.priority,
            payload=candidate.payload.to_dict(),
            updated_at=now,
            escalated_at=escalated_at,
        )
        updated = self.repository.update(refreshed)
        return AdmissionResult(AdmissionOutcome.UPDATED, updated)


__all__ = [
    "AdmissionOutcome",
    "AdmissionResult",
    "NotificationGate",
    "build_dedup_key",
]
