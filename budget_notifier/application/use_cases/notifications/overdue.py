"""Detection of payments whose due date has already passed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from budget_notifier.config import get_settings
from budget_notifier.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    CreditCard,
    FinancialSnapshot,
    FixedPayment,
    InstallmentPlan,
)
from budget_notifier.infrastructure.repositories import FinancialDataRepository
from budget_notifier.utils import today_in_app_timezone

from .due_dates import due_date_in_month

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")


@dataclass
class OverdueItem(Generic[EntityT]):
    """An entity past its due date together with how late it is."""

    entity: EntityT
    due_date: date
    days_overdue: int
    priority: str


@dataclass
class OverduePayments:
    """Overdue entities of a single user grouped by kind."""

    fixed_payments: list[OverdueItem[FixedPayment]] = field(default_factory=list)
    credit_cards: list[OverdueItem[CreditCard]] = field(default_factory=list)
    installments: list[OverdueItem[InstallmentPlan]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.fixed_payments) + len(self.credit_cards) + len(self.installments)


def overdue_priority(days_overdue: int, high_priority_after_days: int) -> str:
    return PRIORITY_HIGH if days_overdue > high_priority_after_days else PRIORITY_MEDIUM


def _paid_in_cycle(paid_on: date | None, due_date: date) -> bool:
    return paid_on is not None and (paid_on.year, paid_on.month) == (due_date.year, due_date.month)


def _item(entity: EntityT, due_date: date, as_of: date, threshold: int) -> OverdueItem[EntityT]:
    days_overdue = (as_of - due_date).days
    return OverdueItem(
        entity=entity,
        due_date=due_date,
        days_overdue=days_overdue,
        priority=overdue_priority(days_overdue, threshold),
    )


def find_overdue_payments(
    snapshot: FinancialSnapshot,
    as_of: date,
    *,
    high_priority_after_days: int = 7,
) -> OverduePayments:
    """Return the overdue fixed payments, credit cards and installments in ``snapshot``.

    An entity is overdue when ``as_of`` is strictly after its due date for
    the current month, no payment was recorded in that month and, for
    balance-bearing entities, something is still owed.
    """

    result = OverduePayments()

    for payment in snapshot.fixed_payments:
        if not payment.is_active:
            continue
        due = due_date_in_month(as_of.year, as_of.month, payment.due_day)
        if as_of > due and not _paid_in_cycle(payment.last_paid_on, due):
            result.fixed_payments.append(_item(payment, due, as_of, high_priority_after_days))

    for card in snapshot.credit_cards:
        if not card.is_active or card.payment_due_day is None:
            continue
        due = due_date_in_month(as_of.year, as_of.month, card.payment_due_day)
        if (
            as_of > due
            and card.current_balance > 0
            and not _paid_in_cycle(card.last_payment_on, due)
        ):
            result.credit_cards.append(_item(card, due, as_of, high_priority_after_days))

    for installment in snapshot.installments:
        if not installment.is_active or installment.next_due_date is None:
            continue
        if as_of > installment.next_due_date and installment.remaining_installments > 0:
            result.installments.append(
                _item(installment, installment.next_due_date, as_of, high_priority_after_days)
            )

    return result


class OverduePaymentDetector:
    """Load a user's financial data and report what is overdue."""

    def __init__(self, session: Session, *, high_priority_after_days: int | None = None) -> None:
        self.session = session
        if high_priority_after_days is None:
            high_priority_after_days = get_settings().overdue_high_priority_days
        self.high_priority_after_days = high_priority_after_days

    def detect(self, user_id: int, as_of: date | None = None) -> OverduePayments:
        as_of = as_of or today_in_app_timezone()
        snapshot = FinancialDataRepository(self.session).load_snapshot(user_id, as_of)
        overdue = find_overdue_payments(
            snapshot, as_of, high_priority_after_days=self.high_priority_after_days
        )
        logger.debug("User %s has %s overdue payments", user_id, overdue.total)
        return overdue


__all__ = [
    "OverdueItem",
    "OverduePaymentDetector",
    "OverduePayments",
    "find_overdue_payments",
    "overdue_priority",
]
