"""SQLAlchemy model for the email delivery log."""

from sqlalchemy import Column, DateTime, Integer, String, Text

from budget_notifier.infrastructure.database import Base
from budget_notifier.utils import now_in_app_naive_datetime


class EmailDeliveryLogModel(Base):
    """One row per attempt to send an email."""

    __tablename__ = "email_delivery_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    email_type = Column(String(50), nullable=False, index=True)
    recipient_email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    provider_message_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    sent_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["EmailDeliveryLogModel"]
