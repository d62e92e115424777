"""Pydantic schemas for API payloads."""

from .email import (
    DeliveryAttemptRead,
    DeliveryStatsRead,
    DeliveryTypeStatsRead,
    EmailHealthRead,
    EmailPreferencesRead,
    EmailPreferencesUpdate,
    EmailSendResultRead,
    EmailStatsRead,
    SendTestEmailRequest,
)
from .notification import (
    DailyRunRead,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationRead,
    UserRunErrorRead,
)

__all__ = [
    "DailyRunRead",
    "DeliveryAttemptRead",
    "DeliveryStatsRead",
    "DeliveryTypeStatsRead",
    "EmailHealthRead",
    "EmailPreferencesRead",
    "EmailPreferencesUpdate",
    "EmailSendResultRead",
    "EmailStatsRead",
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationRead",
    "SendTestEmailRequest",
    "UserRunErrorRead",
]
