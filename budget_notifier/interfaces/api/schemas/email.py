"""Pydantic models exposed by the email operations endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class EmailSendResultRead(BaseModel):
    success: bool
    message_id: str | None = None
    error: str | None = None
    retryable: bool | None = None
    reason: str | None = None


class SendTestEmailRequest(BaseModel):
    user_id: int


class DeliveryAttemptRead(BaseModel):
    id: int
    user_id: int | None = None
    email_type: str
    recipient_email: str
    subject: str
    status: str
    provider_message_id: str | None = None
    error_message: str | None = None
    retry_count: int = 0
    created_at: datetime | None = None
    sent_at: datetime | None = None


class DeliveryTypeStatsRead(BaseModel):
    email_type: str
    total: int
    sent: int
    failed: int
    bounced: int
    queued: int


class DeliveryStatsRead(BaseModel):
    """Aggregated delivery log counters."""

    totals: DeliveryTypeStatsRead
    by_type: list[DeliveryTypeStatsRead]
    success_rate: float


class EmailHealthRead(BaseModel):
    status: str
    enabled: bool
    provider_configured: bool
    circuit_breaker: dict[str, Any]


class EmailStatsRead(BaseModel):
    enabled: bool
    sent: int
    failed: int
    rejected: int
    config: dict[str, Any]
    circuit_breaker: dict[str, Any]


class EmailPreferencesRead(BaseModel):
    user_id: int
    email_enabled: bool
    daily_digest_enabled: bool
    critical_alerts_enabled: bool


class EmailPreferencesUpdate(BaseModel):
    """Partial update; omitted switches keep their stored value."""

    email_enabled: bool | None = None
    daily_digest_enabled: bool | None = None
    critical_alerts_enabled: bool | None = None
