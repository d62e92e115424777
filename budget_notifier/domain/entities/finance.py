"""Read-only financial entities consumed by the notification rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


@dataclass
class FixedPayment:
    """A recurring monthly payment such as rent or a subscription."""

    id: int
    user_id: int
    name: str
    amount: Decimal
    due_day: int
    is_active: bool = True
    last_paid_on: date | None = None


@dataclass
class CreditCard:
    """A credit card with a monthly statement due day."""

    id: int
    user_id: int
    name: str
    current_balance: Decimal
    minimum_payment_rate: Decimal
    payment_due_day: int | None = None
    is_active: bool = True
    last_payment_on: date | None = None

    @property
    def minimum_payment(self) -> Decimal:
        """Return the minimum payment rounded to cents."""

        raw = self.current_balance * self.minimum_payment_rate / Decimal(100)
        return raw.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass
class InstallmentPlan:
    """A purchase paid off in a fixed number of installments."""

    id: int
    user_id: int
    item_name: str
    installment_amount: Decimal
    paid_installments: int
    total_installments: int
    next_due_date: date | None
    is_active: bool = True

    @property
    def remaining_installments(self) -> int:
        return max(self.total_installments - self.paid_installments, 0)


@dataclass
class CategorySpending:
    """Total expenses recorded in a category for the current month."""

    category: str
    total: Decimal


@dataclass
class FinancialSnapshot:
    """Everything the rule evaluators need to know about a single user."""

    user_id: int
    fixed_payments: list[FixedPayment] = field(default_factory=list)
    credit_cards: list[CreditCard] = field(default_factory=list)
    installments: list[InstallmentPlan] = field(default_factory=list)
    category_spending: list[CategorySpending] = field(default_factory=list)


__all__ = [
    "CategorySpending",
    "CreditCard",
    "FinancialSnapshot",
    "FixedPayment",
    "InstallmentPlan",
]
