"""SQLAlchemy model for the users table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from budget_notifier.infrastructure.database import Base


class UserModel(Base):
    """Database representation of the application user.

    The table is owned by the account management service; the notification
    pipeline only reads the columns declared here.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(120), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
