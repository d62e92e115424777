"""ORM models used by the application infrastructure."""

from .email_delivery_log import EmailDeliveryLogModel
from .email_preferences import EmailPreferencesModel
from .finance import (
    CreditCardModel,
    FixedPaymentModel,
    InstallmentPaymentModel,
    TRANSACTION_TYPE_EXPENSE,
    TransactionModel,
)
from .notification import NotificationModel
from .user import UserModel

__all__ = [
    "CreditCardModel",
    "EmailDeliveryLogModel",
    "EmailPreferencesModel",
    "FixedPaymentModel",
    "InstallmentPaymentModel",
    "NotificationModel",
    "TRANSACTION_TYPE_EXPENSE",
    "TransactionModel",
    "UserModel",
]
