"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    user_id: int = Field(..., description="Owner of the notifications")
    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationMarkReadResponse(BaseModel):
    updated: int


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    user_id: int
    notification_type: str
    title: str
    message: str
    priority: str
    related_entity_id: int | None = None
    related_entity_type: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_read: bool = False


class UserRunErrorRead(BaseModel):
    user_id: int
    error: str


class DailyRunRead(BaseModel):
    """Summary returned after triggering the daily notification run."""

    executed: bool
    run_date: date | None = None
    users_processed: int = 0
    notifications_created: int = 0
    notifications_updated: int = 0
    notifications_skipped: int = 0
    errors: list[UserRunErrorRead] = Field(default_factory=list)
