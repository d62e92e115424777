"""Background scheduler running the daily notification and digest jobs."""

from __future__ import annotations

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from budget_notifier.config import Settings
from budget_notifier.utils import get_app_timezone

logger = logging.getLogger(__name__)

NOTIFICATION_JOB_ID = "daily_notifications"
DIGEST_JOB_ID = "daily_email_digest"


def build_scheduler(
    settings: Settings,
    notification_job: Callable[[], object],
    digest_job: Callable[[], object],
) -> BackgroundScheduler:
    """Create (without starting) a scheduler with both daily cron jobs.

    ``max_instances=1`` keeps a slow run from overlapping the next one and
    ``coalesce`` collapses missed runs into a single execution.
    """

    scheduler = BackgroundScheduler(timezone=get_app_timezone())
    scheduler.add_job(
        notification_job,
        "cron",
        id=NOTIFICATION_JOB_ID,
        hour=settings.notification_run_hour,
        minute=settings.notification_run_minute,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        digest_job,
        "cron",
        id=DIGEST_JOB_ID,
        hour=settings.digest_run_hour,
        minute=settings.digest_run_minute,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info(
        "Scheduled daily notifications at %02d:%02d and digests at %02d:%02d",
        settings.notification_run_hour,
        settings.notification_run_minute,
        settings.digest_run_hour,
        settings.digest_run_minute,
    )
    return scheduler


__all__ = ["DIGEST_JOB_ID", "NOTIFICATION_JOB_ID", "build_scheduler"]
