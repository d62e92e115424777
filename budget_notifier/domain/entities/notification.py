"""Domain entities describing smart notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .payloads import NotificationPayload

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"

RELATED_FIXED_PAYMENT = "fixed_payment"
RELATED_CREDIT_CARD = "credit_card"
RELATED_BUDGET = "budget"
RELATED_INSTALLMENT = "installment_payment"


class NotificationType(str, Enum):
    """Kinds of conditions the daily run can detect."""

    FIXED_PAYMENT_3DAY = "fixed_payment_3day"
    FIXED_PAYMENT_1DAY = "fixed_payment_1day"
    FIXED_PAYMENT_TODAY = "fixed_payment_today"
    CREDIT_CARD_5DAY = "credit_card_5day"
    CREDIT_CARD_TODAY = "credit_card_today"
    BUDGET_WARNING_80 = "budget_warning_80"
    BUDGET_EXCEEDED = "budget_exceeded"
    FIXED_PAYMENT_OVERDUE = "fixed_payment_overdue"
    CREDIT_CARD_OVERDUE = "credit_card_overdue"
    INSTALLMENT_OVERDUE = "installment_overdue"

    @property
    def is_overdue(self) -> bool:
        """Return ``True`` for types updated in place while the condition lasts."""

        return self in _OVERDUE_TYPES


_OVERDUE_TYPES = frozenset(
    {
        NotificationType.FIXED_PAYMENT_OVERDUE,
        NotificationType.CREDIT_CARD_OVERDUE,
        NotificationType.INSTALLMENT_OVERDUE,
    }
)


@dataclass
class Notification:
    """Stored notification shown to a specific user."""

    id: int | None
    user_id: int
    notification_type: NotificationType
    title: str
    message: str
    priority: str = PRIORITY_MEDIUM
    related_entity_id: int | None = None
    related_entity_type: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_read: bool = False
    is_dismissed: bool = False
    dedup_key: str | None = None
    escalated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return not self.is_dismissed


@dataclass
class NotificationCandidate:
    """A condition produced by a rule evaluator, not yet persisted."""

    user_id: int
    notification_type: NotificationType
    title: str
    message: str
    priority: str
    payload: NotificationPayload
    related_entity_id: int | None = None
    related_entity_type: str | None = None

    @property
    def subject(self) -> str:
        """Identify what the notification is about for duplicate detection.

        Budget notifications carry no related entity, so the category stands
        in for it.
        """

        if self.related_entity_id is None:
            category = getattr(self.payload, "category", None)
            return f"{self.related_entity_type or 'none'}-{category or 'none'}"
        return f"{self.related_entity_type}-{self.related_entity_id}"


__all__ = [
    "Notification",
    "NotificationCandidate",
    "NotificationType",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "RELATED_BUDGET",
    "RELATED_CREDIT_CARD",
    "RELATED_FIXED_PAYMENT",
    "RELATED_INSTALLMENT",
]
