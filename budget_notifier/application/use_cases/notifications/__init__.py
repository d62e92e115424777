"""Detection and persistence of smart notifications."""

from .daily_run import (
    DailyNotificationJob,
    DailyRunInProgressError,
    DailyRunResult,
    UserRunError,
    get_daily_notification_job,
    run_daily_notifications,
)
from .evaluators import (
    default_evaluators,
    evaluate_budget_thresholds,
    evaluate_credit_cards,
    evaluate_fixed_payments,
    evaluate_overdue_payments,
)
from .gate import AdmissionOutcome, AdmissionResult, NotificationGate, build_dedup_key
from .overdue import (
    OverdueItem,
    OverduePaymentDetector,
    OverduePayments,
    find_overdue_payments,
)

__all__ = [
    "AdmissionOutcome",
    "AdmissionResult",
    "DailyNotificationJob",
    "DailyRunInProgressError",
    "DailyRunResult",
    "NotificationGate",
    "OverdueItem",
    "OverduePaymentDetector",
    "OverduePayments",
    "UserRunError",
    "build_dedup_key",
    "default_evaluators",
    "evaluate_budget_thresholds",
    "evaluate_credit_cards",
    "evaluate_fixed_payments",
    "evaluate_overdue_payments",
    "find_overdue_payments",
    "get_daily_notification_job",
    "run_daily_notifications",
]
