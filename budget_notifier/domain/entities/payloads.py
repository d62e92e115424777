"""Structured payloads attached to each notification type."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar


@dataclass
class NotificationPayload:
    """Base class for the per-type payload variants."""

    _decimal_fields: ClassVar[tuple[str, ...]] = ()
    _date_fields: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the payload."""

        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = float(value)
            elif isinstance(value, date):
                data[key] = value.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationPayload":
        known = {item.name for item in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if value is not None and key in cls._decimal_fields:
                value = Decimal(str(value))
            elif isinstance(value, str) and key in cls._date_fields:
                value = date.fromisoformat(value)
            values[key] = value
        return cls(**values)


@dataclass
class FixedPaymentDuePayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("amount",)
    _date_fields: ClassVar[tuple[str, ...]] = ("due_date",)

    payment_id: int
    payment_name: str
    amount: Decimal
    due_day: int
    due_date: date
    days_until_due: int


@dataclass
class CreditCardDuePayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("current_balance", "minimum_payment")
    _date_fields: ClassVar[tuple[str, ...]] = ("due_date",)

    card_id: int
    card_name: str
    current_balance: Decimal
    minimum_payment: Decimal
    due_day: int
    due_date: date
    days_until_due: int


@dataclass
class BudgetThresholdPayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("spent", "budget", "percentage", "overage")

    category: str
    spent: Decimal
    budget: Decimal
    percentage: Decimal
    overage: Decimal | None = None


@dataclass
class OverdueFixedPaymentPayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("amount",)
    _date_fields: ClassVar[tuple[str, ...]] = ("due_date",)

    payment_id: int
    payment_name: str
    amount: Decimal
    due_date: date
    days_overdue: int
    payment_type: str = "fixed_payment"


@dataclass
class OverdueCreditCardPayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("current_balance", "minimum_payment")
    _date_fields: ClassVar[tuple[str, ...]] = ("due_date",)

    card_id: int
    card_name: str
    current_balance: Decimal
    minimum_payment: Decimal
    due_date: date
    days_overdue: int
    payment_type: str = "credit_card"


@dataclass
class OverdueInstallmentPayload(NotificationPayload):
    _decimal_fields: ClassVar[tuple[str, ...]] = ("installment_amount",)
    _date_fields: ClassVar[tuple[str, ...]] = ("due_date",)

    installment_id: int
    item_name: str
    installment_amount: Decimal
    installment_number: int
    total_installments: int
    due_date: date
    days_overdue: int
    payment_type: str = "installment_payment"


# Keyed by ``NotificationType`` values; the enum is a ``str`` subclass.
PAYLOAD_TYPES: dict[str, type[NotificationPayload]] = {
    "fixed_payment_3day": FixedPaymentDuePayload,
    "fixed_payment_1day": FixedPaymentDuePayload,
    "fixed_payment_today": FixedPaymentDuePayload,
    "credit_card_5day": CreditCardDuePayload,
    "credit_card_today": CreditCardDuePayload,
    "budget_warning_80": BudgetThresholdPayload,
    "budget_exceeded": BudgetThresholdPayload,
    "fixed_payment_overdue": OverdueFixedPaymentPayload,
    "credit_card_overdue": OverdueCreditCardPayload,
    "installment_overdue": OverdueInstallmentPayload,
}


def payload_from_dict(notification_type: str, data: dict[str, Any]) -> NotificationPayload:
    """Rebuild the typed payload stored for ``notification_type``."""

    try:
        payload_cls = PAYLOAD_TYPES[notification_type]
    except KeyError as exc:
        msg = f"Unknown notification type: {notification_type}"
        raise ValueError(msg) from exc
    return payload_cls.from_dict(data)


__all__ = [
    "BudgetThresholdPayload",
    "CreditCardDuePayload",
    "FixedPaymentDuePayload",
    "NotificationPayload",
    "OverdueCreditCardPayload",
    "OverdueFixedPaymentPayload",
    "OverdueInstallmentPayload",
    "PAYLOAD_TYPES",
    "payload_from_dict",
]
