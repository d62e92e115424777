"""Shared fixtures: an in-memory database and helpers to populate it."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from budget_notifier.config import Settings
from budget_notifier.infrastructure.database import initialize_database
from budget_notifier.infrastructure.models import (
    CreditCardModel,
    EmailPreferencesModel,
    FixedPaymentModel,
    InstallmentPaymentModel,
    TRANSACTION_TYPE_EXPENSE,
    TransactionModel,
    UserModel,
)


@pytest.fixture()
def engine():
    """Return a fresh in-memory SQLite engine with every table created."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        email_enabled=True,
        sendgrid_api_key="SG.test",
        email_from_address="notifications@example.com",
        email_retry_delay_ms=0,
    )


class Seeder:
    """Insert rows into the financial tables owned by other services."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _add(self, model):
        self.session.add(model)
        self.session.commit()
        return model.id

    def user(self, name: str = "Ayşe", email: str | None = None, *, is_active: bool = True) -> int:
        return self._add(
            UserModel(
                name=name,
                email=email or f"{name.lower()}@example.com",
                is_active=is_active,
            )
        )

    def fixed_payment(
        self,
        user_id: int,
        *,
        name: str = "Kira",
        amount: str = "5000",
        due_day: int = 15,
        last_paid_on: date | None = None,
        is_active: bool = True,
    ) -> int:
        return self._add(
            FixedPaymentModel(
                user_id=user_id,
                name=name,
                amount=Decimal(amount),
                due_day=due_day,
                last_paid_on=last_paid_on,
                is_active=is_active,
            )
        )

    def credit_card(
        self,
        user_id: int,
        *,
        name: str = "Bonus",
        balance: str = "10000",
        rate: str = "20",
        due_day: int | None = 10,
        last_payment_on: date | None = None,
    ) -> int:
        return self._add(
            CreditCardModel(
                user_id=user_id,
                name=name,
                current_balance=Decimal(balance),
                minimum_payment_rate=Decimal(rate),
                payment_due_date=due_day,
                last_payment_on=last_payment_on,
            )
        )

    def installment(
        self,
        user_id: int,
        *,
        item_name: str = "Laptop",
        amount: str = "1500",
        paid: int = 2,
        total: int = 6,
        next_due_date: date | None = None,
    ) -> int:
        return self._add(
            InstallmentPaymentModel(
                user_id=user_id,
                item_name=item_name,
                installment_amount=Decimal(amount),
                paid_installments=paid,
                total_installments=total,
                next_due_date=next_due_date,
            )
        )

    def expense(self, user_id: int, *, category: str, amount: str, on: date) -> int:
        return self._add(
            TransactionModel(
                user_id=user_id,
                type=TRANSACTION_TYPE_EXPENSE,
                category=category,
                amount=Decimal(amount),
                transaction_date=on,
            )
        )

    def preferences(self, user_id: int, **switches: bool) -> None:
        self.session.add(EmailPreferencesModel(user_id=user_id, **switches))
        self.session.commit()


@pytest.fixture()
def seed(session) -> Seeder:
    return Seeder(session)
