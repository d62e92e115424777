"""Read access to the users table."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from budget_notifier.domain.entities import User
from budget_notifier.infrastructure.models import UserModel


class UserRepository:
    """Provide lookups for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def list_active(self, *, skip: int = 0, limit: int | None = None) -> Sequence[User]:
        query = (
            self.session.query(UserModel)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_active_ids(self) -> list[int]:
        query = (
            self.session.query(UserModel.id)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
        )
        return [user_id for (user_id,) in query.all()]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            is_active=bool(model.is_active),
        )


__all__ = ["UserRepository"]
