"""Tests for overdue payment detection."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from budget_notifier.application.use_cases.notifications import (
    OverduePaymentDetector,
    find_overdue_payments,
)
from budget_notifier.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    CreditCard,
    FinancialSnapshot,
    FixedPayment,
    InstallmentPlan,
)


def _payment(due_day: int = 5, last_paid_on: date | None = None) -> FixedPayment:
    return FixedPayment(
        id=1,
        user_id=1,
        name="Kira",
        amount=Decimal("5000"),
        due_day=due_day,
        last_paid_on=last_paid_on,
    )


def _installment(**overrides) -> InstallmentPlan:
    values = dict(
        id=4,
        user_id=1,
        item_name="Telefon",
        installment_amount=Decimal("750"),
        paid_installments=3,
        total_installments=12,
        next_due_date=date(2024, 6, 1),
    )
    values.update(overrides)
    return InstallmentPlan(**values)


def test_unpaid_fixed_payment_after_due_date_is_overdue() -> None:
    snapshot = FinancialSnapshot(user_id=1, fixed_payments=[_payment()])

    overdue = find_overdue_payments(snapshot, date(2024, 6, 12), high_priority_after_days=7)

    assert overdue.total == 1
    item = overdue.fixed_payments[0]
    assert item.due_date == date(2024, 6, 5)
    assert item.days_overdue == 7
    assert item.priority == PRIORITY_MEDIUM


def test_priority_becomes_high_after_threshold() -> None:
    snapshot = FinancialSnapshot(user_id=1, fixed_payments=[_payment()])

    overdue = find_overdue_payments(snapshot, date(2024, 6, 13), high_priority_after_days=7)

    assert overdue.fixed_payments[0].days_overdue == 8
    assert overdue.fixed_payments[0].priority == PRIORITY_HIGH


def test_payment_recorded_this_month_is_not_overdue() -> None:
    paid = FinancialSnapshot(
        user_id=1, fixed_payments=[_payment(last_paid_on=date(2024, 6, 3))]
    )
    paid_last_month = FinancialSnapshot(
        user_id=1, fixed_payments=[_payment(last_paid_on=date(2024, 5, 5))]
    )

    assert find_overdue_payments(paid, date(2024, 6, 12)).total == 0
    assert find_overdue_payments(paid_last_month, date(2024, 6, 12)).total == 1


def test_due_day_itself_is_not_overdue() -> None:
    snapshot = FinancialSnapshot(user_id=1, fixed_payments=[_payment()])

    assert find_overdue_payments(snapshot, date(2024, 6, 5)).total == 0


def test_credit_card_without_balance_is_not_overdue() -> None:
    card = CreditCard(
        id=2,
        user_id=1,
        name="Bonus",
        current_balance=Decimal("0"),
        minimum_payment_rate=Decimal("20"),
        payment_due_day=1,
    )
    owing = CreditCard(
        id=3,
        user_id=1,
        name="World",
        current_balance=Decimal("250"),
        minimum_payment_rate=Decimal("20"),
        payment_due_day=1,
    )
    snapshot = FinancialSnapshot(user_id=1, credit_cards=[card, owing])

    overdue = find_overdue_payments(snapshot, date(2024, 6, 4))

    assert [item.entity.id for item in overdue.credit_cards] == [3]
    assert overdue.credit_cards[0].days_overdue == 3


def test_installments() -> None:
    snapshot = FinancialSnapshot(
        user_id=1,
        installments=[
            _installment(),
            _installment(id=5, paid_installments=12),
            _installment(id=6, next_due_date=date(2024, 6, 20)),
            _installment(id=7, next_due_date=None),
        ],
    )

    overdue = find_overdue_payments(snapshot, date(2024, 6, 10), high_priority_after_days=7)

    assert [item.entity.id for item in overdue.installments] == [4]
    assert overdue.installments[0].days_overdue == 9
    assert overdue.installments[0].priority == PRIORITY_HIGH


def test_detector_reads_user_data(session, seed) -> None:
    user_id = seed.user()
    other_user_id = seed.user("Mehmet")
    seed.fixed_payment(user_id, due_day=5)
    seed.fixed_payment(other_user_id, due_day=5)
    seed.installment(user_id, next_due_date=date(2024, 6, 8))

    overdue = OverduePaymentDetector(session, high_priority_after_days=7).detect(
        user_id, date(2024, 6, 10)
    )

    assert len(overdue.fixed_payments) == 1
    assert overdue.fixed_payments[0].entity.user_id == user_id
    assert len(overdue.installments) == 1
    assert overdue.installments[0].days_overdue == 2
