"""Once-a-day batch deriving notifications for every active user."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from typing import Callable, Sequence

from sqlalchemy.orm import Session

from budget_notifier.config import Settings, get_settings
from budget_notifier.domain.entities import NotificationCandidate
from budget_notifier.infrastructure.repositories import (
    FinancialDataRepository,
    UserRepository,
)
from budget_notifier.utils import ensure_app_timezone, now_in_app_timezone

from .evaluators import Evaluator, default_evaluators
from .gate import AdmissionOutcome, NotificationGate

logger = logging.getLogger(__name__)


class DailyRunInProgressError(RuntimeError):
    """Raised when the daily run is triggered while it is already running."""


@dataclass
class UserRunError:
    user_id: int
    error: str


@dataclass
class DailyRunResult:
    """Counters describing a completed daily run."""

    run_date: date
    users_processed: int = 0
    notifications_created: int = 0
    notifications_updated: int = 0
    notifications_skipped: int = 0
    errors: list[UserRunError] = field(default_factory=list)

    @property
    def users_failed(self) -> int:
        return len(self.errors)


def run_daily_notifications(
    session: Session,
    *,
    now: datetime | None = None,
    evaluators: Sequence[Evaluator] | None = None,
    settings: Settings | None = None,
) -> DailyRunResult:
    """Evaluate every active user and admit the resulting candidates.

    Users are processed one after another. A failure while evaluating or
    persisting a user's notifications is rolled back, logged and recorded in
    :attr:`DailyRunResult.errors`; the run then continues with the next user.
    """

    settings = settings or get_settings()
    now = ensure_app_timezone(now) or now_in_app_timezone()
    as_of = now.date()
    if evaluators is None:
        evaluators = default_evaluators(settings)

    user_ids = UserRepository(session).list_active_ids()
    financial_data = FinancialDataRepository(session)
    gate = NotificationGate(session)
    result = DailyRunResult(run_date=as_of)

    logger.info("Starting daily notification run for %s users on %s", len(user_ids), as_of)

    for user_id in user_ids:
        result.users_processed += 1
        try:
            snapshot = financial_data.load_snapshot(user_id, as_of)
            candidates: list[NotificationCandidate] = []
            for evaluator in evaluators:
                candidates.extend(evaluator(user_id, as_of, snapshot))

            for candidate in candidates:
                admission = gate.admit(candidate, now=now)
                if admission.outcome is AdmissionOutcome.CREATED:
                    result.notifications_created += 1
                elif admission.outcome is AdmissionOutcome.UPDATED:
                    result.notifications_updated += 1
                else:
                    result.notifications_skipped += 1
        except Exception as exc:
            session.rollback()
            logger.exception("Daily notification run failed for user %s", user_id)
            result.errors.append(UserRunError(user_id=user_id, error=str(exc)))

    logger.info(
        "Daily notification run finished: %s users, %s created, %s updated, "
        "%s skipped, %s failed",
        result.users_processed,
        result.notifications_created,
        result.notifications_updated,
        result.notifications_skipped,
        result.users_failed,
    )
    return result


class DailyNotificationJob:
    """Run :func:`run_daily_notifications` at most once at a time and once a day.

    The scheduler, the HTTP trigger and the CLI share one instance per
    process. ``force`` reruns a day that already completed, which is safe
    because the gate suppresses duplicates.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        settings: Settings | None = None,
        evaluators: Sequence[Evaluator] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._evaluators = evaluators
        self._lock = threading.Lock()
        self._last_completed: date | None = None

    @property
    def last_completed(self) -> date | None:
        return self._last_completed

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run(
        self, *, force: bool = False, now: datetime | None = None
    ) -> DailyRunResult | None:
        """Execute the run, returning ``None`` when today's run already completed."""

        if not self._lock.acquire(blocking=False):
            raise DailyRunInProgressError("The daily notification run is already in progress")
        try:
            now = ensure_app_timezone(now) or now_in_app_timezone()
            if not force and self._last_completed == now.date():
                logger.info("Daily notification run for %s already completed", now.date())
                return None

            session = self._session_factory()
            try:
                result = run_daily_notifications(
                    session,
                    now=now,
                    evaluators=self._evaluators,
                    settings=self._settings,
                )
            finally:
                session.close()

            self._last_completed = result.run_date
            return result
        finally:
            self._lock.release()


@lru_cache
def get_daily_notification_job() -> DailyNotificationJob:
    """Return the process-wide job instance."""

    from budget_notifier.infrastructure.database import SessionLocal

    return DailyNotificationJob(SessionLocal)


__all__ = [
    "DailyNotificationJob",
    "DailyRunInProgressError",
    "DailyRunResult",
    "UserRunError",
    "get_daily_notification_job",
    "run_daily_notifications",
]
