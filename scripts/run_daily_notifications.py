"""Run the daily notification batch once from the command line."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime, time

from sqlalchemy.exc import SQLAlchemyError

from budget_notifier.application.use_cases.emails import send_daily_digests
from budget_notifier.application.use_cases.notifications import run_daily_notifications
from budget_notifier.config import get_settings
from budget_notifier.infrastructure.database import SessionLocal, initialize_database
from budget_notifier.infrastructure.email_dispatcher import get_email_dispatcher
from budget_notifier.utils import get_app_timezone, now_in_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the daily run."""

    parser = argparse.ArgumentParser(
        description="Detect payment reminders, overdue payments and budget alerts for all users.",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Evaluate as of this date (YYYY-MM-DD) instead of today",
    )
    parser.add_argument(
        "--digest",
        action="store_true",
        help="Send critical alerts and daily digest emails after the run",
    )
    return parser.parse_args()


def main() -> None:
    """Run the batch using the provided command line arguments."""

    args = parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    now = now_in_app_timezone()
    if args.date is not None:
        now = datetime.combine(args.date, time(12, 0), tzinfo=get_app_timezone())

    initialize_database()

    session = SessionLocal()
    try:
        result = run_daily_notifications(session, now=now, settings=settings)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Daily notification run failed: {exc}") from exc
    finally:
        session.close()

    print(
        f"Run date: {result.run_date}\n"
        f"  Users processed: {result.users_processed}\n"
        f"  Created: {result.notifications_created}\n"
        f"  Updated: {result.notifications_updated}\n"
        f"  Skipped: {result.notifications_skipped}\n"
        f"  Failed users: {result.users_failed}"
    )

    if args.digest:
        digest = send_daily_digests(
            SessionLocal, get_email_dispatcher(), today=now.date(), settings=settings
        )
        print(
            "Digest:\n"
            f"  Sent: {digest.sent}\n"
            f"  Failed: {digest.failed}\n"
            f"  Skipped: {digest.skipped}\n"
            f"  Aborted: {'yes' if digest.aborted else 'no'}"
        )

    if result.errors:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
