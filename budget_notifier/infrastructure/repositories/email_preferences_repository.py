"""Persistence helpers for user email preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from budget_notifier.domain.entities import EmailPreferences
from budget_notifier.infrastructure.models import EmailPreferencesModel


class EmailPreferencesRepository:
    """Read and update :class:`EmailPreferences` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> EmailPreferences | None:
        model = self.session.get(EmailPreferencesModel, user_id)
        return self._to_entity(model) if model else None

    def get_or_default(self, user_id: int) -> EmailPreferences:
        """Return stored preferences, or the all-enabled defaults when none exist."""

        return self.get(user_id) or EmailPreferences(user_id=user_id)

    def save(self, preferences: EmailPreferences) -> EmailPreferences:
        model = self.session.get(EmailPreferencesModel, preferences.user_id)
        if model is None:
            model = EmailPreferencesModel(user_id=preferences.user_id)
        model.email_enabled = preferences.email_enabled
        model.daily_digest_enabled = preferences.daily_digest_enabled
        model.critical_alerts_enabled = preferences.critical_alerts_enabled
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: EmailPreferencesModel) -> EmailPreferences:
        return EmailPreferences(
            user_id=model.user_id,
            email_enabled=bool(model.email_enabled),
            daily_digest_enabled=bool(model.daily_digest_enabled),
            critical_alerts_enabled=bool(model.critical_alerts_enabled),
        )


__all__ = ["EmailPreferencesRepository"]
