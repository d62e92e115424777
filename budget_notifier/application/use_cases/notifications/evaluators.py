"""Rules turning a user's financial snapshot into notification candidates.

Every evaluator shares the signature ``(user_id, as_of, snapshot)`` and is a
pure function of its inputs, so the daily run can call them in sequence
without touching the database in between.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping, Sequence

from budget_notifier.config import Settings
from budget_notifier.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    RELATED_BUDGET,
    RELATED_CREDIT_CARD,
    RELATED_FIXED_PAYMENT,
    RELATED_INSTALLMENT,
    BudgetThresholdPayload,
    CreditCardDuePayload,
    FinancialSnapshot,
    FixedPaymentDuePayload,
    NotificationCandidate,
    NotificationType,
    OverdueCreditCardPayload,
    OverdueFixedPaymentPayload,
    OverdueInstallmentPayload,
)

from .due_dates import days_until_due, format_amount, month_name, next_due_date
from .overdue import find_overdue_payments

Evaluator = Callable[[int, date, FinancialSnapshot], list[NotificationCandidate]]

BUDGET_WARNING_PERCENTAGE = Decimal("80")
BUDGET_EXCEEDED_PERCENTAGE = Decimal("100")

_FIXED_PAYMENT_RULES: dict[int, tuple[NotificationType, str]] = {
    3: (NotificationType.FIXED_PAYMENT_3DAY, PRIORITY_MEDIUM),
    1: (NotificationType.FIXED_PAYMENT_1DAY, PRIORITY_HIGH),
    0: (NotificationType.FIXED_PAYMENT_TODAY, PRIORITY_HIGH),
}

_CREDIT_CARD_RULES: dict[int, tuple[NotificationType, str]] = {
    5: (NotificationType.CREDIT_CARD_5DAY, PRIORITY_MEDIUM),
    0: (NotificationType.CREDIT_CARD_TODAY, PRIORITY_HIGH),
}

_PERCENT_QUANTUM = Decimal("0.01")


def _fixed_payment_copy(days: int, name: str, due_day: int, month: str, amount: str) -> tuple[str, str]:
    if days == 3:
        return (
            f"{name} - 3 gün sonra",
            f"{name} ödemesi 3 gün sonra ({due_day} {month}) - {amount} TL",
        )
    if days == 1:
        return (
            f"{name} - Yarın ödeme günü",
            f"{name} ödemesi yarın ({due_day} {month}) - {amount} TL",
        )
    return (
        f"{name} - Bugün ödeme günü!",
        f"{name} ödemesi bugün yapılmalı - {amount} TL",
    )


def evaluate_fixed_payments(
    user_id: int, as_of: date, snapshot: FinancialSnapshot
) -> list[NotificationCandidate]:
    """Remind about fixed payments due in exactly 3, 1 or 0 days."""

    candidates: list[NotificationCandidate] = []
    for payment in snapshot.fixed_payments:
        if not payment.is_active:
            continue
        days = days_until_due(as_of, payment.due_day)
        rule = _FIXED_PAYMENT_RULES.get(days)
        if rule is None:
            continue
        notification_type, priority = rule
        due_date = next_due_date(as_of, payment.due_day)
        title, message = _fixed_payment_copy(
            days,
            payment.name,
            due_date.day,
            month_name(due_date.month),
            format_amount(payment.amount),
        )
        candidates.append(
            NotificationCandidate(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                priority=priority,
                payload=FixedPaymentDuePayload(
                    payment_id=payment.id,
                    payment_name=payment.name,
                    amount=payment.amount,
                    due_day=payment.due_day,
                    due_date=due_date,
                    days_until_due=days,
                ),
                related_entity_id=payment.id,
                related_entity_type=RELATED_FIXED_PAYMENT,
            )
        )
    return candidates


def evaluate_credit_cards(
    user_id: int, as_of: date, snapshot: FinancialSnapshot
) -> list[NotificationCandidate]:
    """Remind about credit card statements due in exactly 5 or 0 days."""

    candidates: list[NotificationCandidate] = []
    for card in snapshot.credit_cards:
        if not card.is_active or card.payment_due_day is None:
            continue
        days = days_until_due(as_of, card.payment_due_day)
        rule = _CREDIT_CARD_RULES.get(days)
        if rule is None:
            continue
        notification_type, priority = rule
        due_date = next_due_date(as_of, card.payment_due_day)
        minimum = format_amount(card.minimum_payment)
        if days == 5:
            title = f"{card.name} - Son ödeme tarihi yaklaşıyor"
            message = (
                f"{card.name} kredi kartı son ödeme tarihi 5 gün sonra "
                f"({due_date.day} {month_name(due_date.month)}) - "
                f"Minimum ödeme: {minimum} TL"
            )
        else:
            title = f"{card.name} - Bugün son ödeme günü!"
            message = (
                f"{card.name} kredi kartı ödemesi bugün yapılmalı - "
                f"Minimum ödeme: {minimum} TL, "
                f"Toplam borç: {format_amount(card.current_balance)} TL"
            )
        candidates.append(
            NotificationCandidate(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                priority=priority,
                payload=CreditCardDuePayload(
                    card_id=card.id,
                    card_name=card.name,
                    current_balance=card.current_balance,
                    minimum_payment=card.minimum_payment,
                    due_day=card.payment_due_day,
                    due_date=due_date,
                    days_until_due=days,
                ),
                related_entity_id=card.id,
                related_entity_type=RELATED_CREDIT_CARD,
            )
        )
    return candidates


def evaluate_budget_thresholds(thresholds: Mapping[str, Decimal]) -> Evaluator:
    """Build an evaluator comparing monthly spending to ``thresholds``.

    Categories without a configured ceiling are ignored.
    """

    def evaluate(
        user_id: int, as_of: date, snapshot: FinancialSnapshot
    ) -> list[NotificationCandidate]:
        candidates: list[NotificationCandidate] = []
        for spending in snapshot.category_spending:
            budget = thresholds.get(spending.category)
            if budget is None or budget <= 0:
                continue
            spent = spending.total
            usage = spent * 100
            percentage = (usage / budget).quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
            # Thresholds compare the unrounded usage.
            if usage >= budget * BUDGET_EXCEEDED_PERCENTAGE:
                overage = spent - budget
                candidates.append(
                    NotificationCandidate(
                        user_id=user_id,
                        notification_type=NotificationType.BUDGET_EXCEEDED,
                        title=f"{spending.category} bütçesi aşıldı!",
                        message=(
                            f"{spending.category} kategorisinde bütçenizi "
                            f"{format_amount(overage)} TL aştınız "
                            f"({format_amount(spent)} TL / {format_amount(budget)} TL)"
                        ),
                        priority=PRIORITY_HIGH,
                        payload=BudgetThresholdPayload(
                            category=spending.category,
                            spent=spent,
                            budget=budget,
                            percentage=percentage,
                            overage=overage,
                        ),
                        related_entity_type=RELATED_BUDGET,
                    )
                )
            elif usage >= budget * BUDGET_WARNING_PERCENTAGE:
                rounded = percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
                candidates.append(
                    NotificationCandidate(
                        user_id=user_id,
                        notification_type=NotificationType.BUDGET_WARNING_80,
                        title=f"{spending.category} bütçesi uyarısı",
                        message=(
                            f"{spending.category} kategorisinde bütçenizin "
                            f"%{rounded}'ini kullandınız "
                            f"({format_amount(spent)} TL / {format_amount(budget)} TL)"
                        ),
                        priority=PRIORITY_MEDIUM,
                        payload=BudgetThresholdPayload(
                            category=spending.category,
                            spent=spent,
                            budget=budget,
                            percentage=percentage,
                        ),
                        related_entity_type=RELATED_BUDGET,
                    )
                )
        return candidates

    return evaluate


def evaluate_overdue_payments(high_priority_after_days: int = 7) -> Evaluator:
    """Build an evaluator emitting one candidate per overdue item."""

    def evaluate(
        user_id: int, as_of: date, snapshot: FinancialSnapshot
    ) -> list[NotificationCandidate]:
        overdue = find_overdue_payments(
            snapshot, as_of, high_priority_after_days=high_priority_after_days
        )
        candidates: list[NotificationCandidate] = []

        for item in overdue.fixed_payments:
            payment = item.entity
            candidates.append(
                NotificationCandidate(
                    user_id=user_id,
                    notification_type=NotificationType.FIXED_PAYMENT_OVERDUE,
                    title=f"Ödeme Gecikti: {payment.name}",
                    message=(
                        f"{payment.name} ödemesi {item.days_overdue} gün önce "
                        f"yapılmalıydı - {format_amount(payment.amount)} TL"
                    ),
                    priority=item.priority,
                    payload=OverdueFixedPaymentPayload(
                        payment_id=payment.id,
                        payment_name=payment.name,
                        amount=payment.amount,
                        due_date=item.due_date,
                        days_overdue=item.days_overdue,
                    ),
                    related_entity_id=payment.id,
                    related_entity_type=RELATED_FIXED_PAYMENT,
                )
            )

        for item in overdue.credit_cards:
            card = item.entity
            candidates.append(
                NotificationCandidate(
                    user_id=user_id,
                    notification_type=NotificationType.CREDIT_CARD_OVERDUE,
                    title=f"Kredi Kartı Ödemesi Gecikti: {card.name}",
                    message=(
                        f"{card.name} kredi kartı ödemesi {item.days_overdue} gün gecikti - "
                        f"Minimum ödeme: {format_amount(card.minimum_payment)} TL, "
                        f"Toplam borç: {format_amount(card.current_balance)} TL"
                    ),
                    priority=item.priority,
                    payload=OverdueCreditCardPayload(
                        card_id=card.id,
                        card_name=card.name,
                        current_balance=card.current_balance,
                        minimum_payment=card.minimum_payment,
                        due_date=item.due_date,
                        days_overdue=item.days_overdue,
                    ),
                    related_entity_id=card.id,
                    related_entity_type=RELATED_CREDIT_CARD,
                )
            )

        for item in overdue.installments:
            plan = item.entity
            installment_number = plan.paid_installments + 1
            candidates.append(
                NotificationCandidate(
                    user_id=user_id,
                    notification_type=NotificationType.INSTALLMENT_OVERDUE,
                    title=f"Taksit Ödemesi Gecikti: {plan.item_name}",
                    message=(
                        f"{plan.item_name} - {installment_number}. taksit ödemesi "
                        f"{item.days_overdue} gün gecikti - "
                        f"{format_amount(plan.installment_amount)} TL"
                    ),
                    priority=item.priority,
                    payload=OverdueInstallmentPayload(
                        installment_id=plan.id,
                        item_name=plan.item_name,
                        installment_amount=plan.installment_amount,
                        installment_number=installment_number,
                        total_installments=plan.total_installments,
                        due_date=item.due_date,
                        days_overdue=item.days_overdue,
                    ),
                    related_entity_id=plan.id,
                    related_entity_type=RELATED_INSTALLMENT,
                )
            )

        return candidates

    return evaluate


def default_evaluators(settings: Settings) -> Sequence[Evaluator]:
    """Return the evaluators run for every user, in their fixed order."""

    return (
        evaluate_fixed_payments,
        evaluate_credit_cards,
        evaluate_budget_thresholds(settings.budget_thresholds),
        evaluate_overdue_payments(settings.overdue_high_priority_days),
    )


__all__ = [
    "BUDGET_EXCEEDED_PERCENTAGE",
    "BUDGET_WARNING_PERCENTAGE",
    "Evaluator",
    "default_evaluators",
    "evaluate_budget_thresholds",
    "evaluate_credit_cards",
    "evaluate_fixed_payments",
    "evaluate_overdue_payments",
]
