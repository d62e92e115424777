"""Repository implementations for infrastructure layer."""

from .email_delivery_log_repository import EmailDeliveryLogRepository
from .email_preferences_repository import EmailPreferencesRepository
from .financial_data_repository import FinancialDataRepository
from .notification_repository import NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "EmailDeliveryLogRepository",
    "EmailPreferencesRepository",
    "FinancialDataRepository",
    "NotificationRepository",
    "UserRepository",
]
