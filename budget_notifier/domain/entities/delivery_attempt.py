"""Domain entities describing outbound email delivery attempts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DELIVERY_STATUS_QUEUED = "queued"
DELIVERY_STATUS_SENT = "sent"
DELIVERY_STATUS_FAILED = "failed"
DELIVERY_STATUS_BOUNCED = "bounced"

DELIVERY_STATUSES = (
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_BOUNCED,
)

# A queued attempt resolves exactly once; resolved attempts are immutable.
ALLOWED_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    DELIVERY_STATUS_QUEUED: frozenset({DELIVERY_STATUS_SENT, DELIVERY_STATUS_FAILED}),
}


@dataclass
class DeliveryAttempt:
    """One try at sending an email through the provider."""

    id: int | None
    user_id: int | None
    email_type: str
    recipient_email: str
    subject: str
    status: str = DELIVERY_STATUS_QUEUED
    provider_message_id: str | None = None
    error_message: str | None = None
    retry_count: int = 0
    sent_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class DeliveryTypeStats:
    """Delivery counters for a single email type."""

    email_type: str
    total: int = 0
    sent: int = 0
    failed: int = 0
    bounced: int = 0
    queued: int = 0


@dataclass
class DeliveryStats:
    """Aggregated view over the delivery log."""

    totals: DeliveryTypeStats = field(default_factory=lambda: DeliveryTypeStats("all"))
    by_type: list[DeliveryTypeStats] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Return the share of sent attempts as a percentage."""

        if self.totals.total == 0:
            return 0.0
        return round(self.totals.sent / self.totals.total * 100, 2)


__all__ = [
    "ALLOWED_STATUS_TRANSITIONS",
    "DELIVERY_STATUSES",
    "DELIVERY_STATUS_BOUNCED",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_QUEUED",
    "DELIVERY_STATUS_SENT",
    "DeliveryAttempt",
    "DeliveryStats",
    "DeliveryTypeStats",
]
