"""Aggregate application use cases."""

from .emails import send_daily_digests, send_test_email
from .notifications import run_daily_notifications

__all__ = [
    "run_daily_notifications",
    "send_daily_digests",
    "send_test_email",
]
