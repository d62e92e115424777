"""SQLAlchemy model for persisted smart notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.sql import expression

from budget_notifier.infrastructure.database import Base
from budget_notifier.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "smart_notifications"
    __table_args__ = (
        Index(
            "ix_smart_notifications_lookup",
            "user_id",
            "notification_type",
            "related_entity_id",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    notification_type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False, default="medium")
    related_entity_id = Column(Integer, nullable=True)
    related_entity_type = Column(String(50), nullable=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_dismissed = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    # Unique while the notification is open; cleared on dismissal.
    dedup_key = Column(String(255), nullable=True, unique=True)
    # When the notification last turned high priority.
    escalated_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
