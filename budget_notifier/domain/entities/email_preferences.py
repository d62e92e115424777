"""Domain entity representing a user's email notification preferences."""

from dataclasses import dataclass


@dataclass
class EmailPreferences:
    """Switches controlling which emails a user receives."""

    user_id: int
    email_enabled: bool = True
    daily_digest_enabled: bool = True
    critical_alerts_enabled: bool = True

    def allows_digest(self) -> bool:
        return self.email_enabled and self.daily_digest_enabled

    def allows_critical_alerts(self) -> bool:
        return self.email_enabled and self.critical_alerts_enabled
