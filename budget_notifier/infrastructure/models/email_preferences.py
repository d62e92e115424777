"""SQLAlchemy model for per-user email preferences."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import expression

from budget_notifier.infrastructure.database import Base
from budget_notifier.utils import now_in_app_naive_datetime


class EmailPreferencesModel(Base):
    """Email switches stored for a user."""

    __tablename__ = "user_email_preferences"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    email_enabled = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    daily_digest_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    critical_alerts_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    updated_at = Column(
        DateTime(),
        nullable=True,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["EmailPreferencesModel"]
