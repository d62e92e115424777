"""Use cases sending emails to users."""

from .digest import (
    DigestRunResult,
    send_critical_alert,
    send_daily_digest,
    send_daily_digests,
    send_test_email,
)
from .retry import send_with_retry

__all__ = [
    "DigestRunResult",
    "send_critical_alert",
    "send_daily_digest",
    "send_daily_digests",
    "send_test_email",
    "send_with_retry",
]
