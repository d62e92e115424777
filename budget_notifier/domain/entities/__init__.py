"""Domain entities exposed by the application."""

from .delivery_attempt import (
    DELIVERY_STATUS_BOUNCED,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DeliveryAttempt,
    DeliveryStats,
    DeliveryTypeStats,
)
from .email_preferences import EmailPreferences
from .finance import (
    CategorySpending,
    CreditCard,
    FinancialSnapshot,
    FixedPayment,
    InstallmentPlan,
)
from .notification import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    RELATED_BUDGET,
    RELATED_CREDIT_CARD,
    RELATED_FIXED_PAYMENT,
    RELATED_INSTALLMENT,
    Notification,
    NotificationCandidate,
    NotificationType,
)
from .payloads import (
    BudgetThresholdPayload,
    CreditCardDuePayload,
    FixedPaymentDuePayload,
    NotificationPayload,
    OverdueCreditCardPayload,
    OverdueFixedPaymentPayload,
    OverdueInstallmentPayload,
    payload_from_dict,
)
from .user import User

__all__ = [
    "BudgetThresholdPayload",
    "CategorySpending",
    "CreditCard",
    "CreditCardDuePayload",
    "DELIVERY_STATUS_BOUNCED",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_QUEUED",
    "DELIVERY_STATUS_SENT",
    "DeliveryAttempt",
    "DeliveryStats",
    "DeliveryTypeStats",
    "EmailPreferences",
    "FinancialSnapshot",
    "FixedPayment",
    "FixedPaymentDuePayload",
    "InstallmentPlan",
    "Notification",
    "NotificationCandidate",
    "NotificationPayload",
    "NotificationType",
    "OverdueCreditCardPayload",
    "OverdueFixedPaymentPayload",
    "OverdueInstallmentPayload",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "RELATED_BUDGET",
    "RELATED_CREDIT_CARD",
    "RELATED_FIXED_PAYMENT",
    "RELATED_INSTALLMENT",
    "User",
    "payload_from_dict",
]
