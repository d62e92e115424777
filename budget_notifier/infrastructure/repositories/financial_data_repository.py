"""Read-only access to the financial data evaluated by the notification rules."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from budget_notifier.domain.entities import (
    CategorySpending,
    CreditCard,
    FinancialSnapshot,
    FixedPayment,
    InstallmentPlan,
)
from budget_notifier.infrastructure.models import (
    CreditCardModel,
    FixedPaymentModel,
    InstallmentPaymentModel,
    TRANSACTION_TYPE_EXPENSE,
    TransactionModel,
)


def _month_boundaries(reference: date) -> tuple[date, date]:
    """Return the first day of ``reference``'s month and of the following month."""

    start = reference.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month


def _as_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class FinancialDataRepository:
    """Load the per-user financial entities without ever writing to them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active_fixed_payments(self, user_id: int) -> list[FixedPayment]:
        query = (
            self.session.query(FixedPaymentModel)
            .filter(FixedPaymentModel.user_id == user_id)
            .filter(FixedPaymentModel.is_active.is_(True))
            .order_by(FixedPaymentModel.id)
        )
        return [
            FixedPayment(
                id=model.id,
                user_id=model.user_id,
                name=model.name,
                amount=_as_decimal(model.amount),
                due_day=model.due_day,
                is_active=bool(model.is_active),
                last_paid_on=model.last_paid_on,
            )
            for model in query.all()
        ]

    def list_active_credit_cards(self, user_id: int) -> list[CreditCard]:
        query = (
            self.session.query(CreditCardModel)
            .filter(CreditCardModel.user_id == user_id)
            .filter(CreditCardModel.is_active.is_(True))
            .order_by(CreditCardModel.id)
        )
        return [
            CreditCard(
                id=model.id,
                user_id=model.user_id,
                name=model.name,
                current_balance=_as_decimal(model.current_balance),
                minimum_payment_rate=_as_decimal(model.minimum_payment_rate),
                payment_due_day=model.payment_due_date,
                is_active=bool(model.is_active),
                last_payment_on=model.last_payment_on,
            )
            for model in query.all()
        ]

    def list_active_installments(self, user_id: int) -> list[InstallmentPlan]:
        query = (
            self.session.query(InstallmentPaymentModel)
            .filter(InstallmentPaymentModel.user_id == user_id)
            .filter(InstallmentPaymentModel.is_active.is_(True))
            .order_by(InstallmentPaymentModel.id)
        )
        return [
            InstallmentPlan(
                id=model.id,
                user_id=model.user_id,
                item_name=model.item_name,
                installment_amount=_as_decimal(model.installment_amount),
                paid_installments=model.paid_installments or 0,
                total_installments=model.total_installments,
                next_due_date=model.next_due_date,
                is_active=bool(model.is_active),
            )
            for model in query.all()
        ]

    def monthly_expenses_by_category(
        self, user_id: int, reference: date
    ) -> list[CategorySpending]:
        """Sum the expenses of ``reference``'s month grouped by category."""

        start, next_month = _month_boundaries(reference)
        query = (
            self.session.query(
                TransactionModel.category,
                func.sum(TransactionModel.amount),
            )
            .filter(TransactionModel.user_id == user_id)
            .filter(TransactionModel.type == TRANSACTION_TYPE_EXPENSE)
            .filter(TransactionModel.transaction_date >= start)
            .filter(TransactionModel.transaction_date < next_month)
            .group_by(TransactionModel.category)
            .order_by(TransactionModel.category)
        )
        return [
            CategorySpending(category=category, total=_as_decimal(total))
            for category, total in query.all()
            if category
        ]

    def load_snapshot(self, user_id: int, as_of: date) -> FinancialSnapshot:
        return FinancialSnapshot(
            user_id=user_id,
            fixed_payments=self.list_active_fixed_payments(user_id),
            credit_cards=self.list_active_credit_cards(user_id),
            installments=self.list_active_installments(user_id),
            category_spending=self.monthly_expenses_by_category(user_id, as_of),
        )


__all__ = ["FinancialDataRepository"]
