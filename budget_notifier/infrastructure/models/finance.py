"""SQLAlchemy models for the financial tables read by the notification rules."""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String

from budget_notifier.infrastructure.database import Base

TRANSACTION_TYPE_EXPENSE = "expense"


class FixedPaymentModel(Base):
    """Recurring monthly payment configured by a user."""

    __tablename__ = "fixed_payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_day = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_paid_on = Column(Date, nullable=True)


class CreditCardModel(Base):
    """Credit card owned by a user."""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    minimum_payment_rate = Column(Numeric(5, 2), nullable=False, default=20)
    # Day of the month the statement is due.
    payment_due_date = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_payment_on = Column(Date, nullable=True)


class InstallmentPaymentModel(Base):
    """Purchase split into monthly installments."""

    __tablename__ = "installment_payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_name = Column(String(150), nullable=False)
    installment_amount = Column(Numeric(12, 2), nullable=False)
    paid_installments = Column(Integer, nullable=False, default=0)
    total_installments = Column(Integer, nullable=False)
    next_due_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class TransactionModel(Base):
    """Money movement recorded against a user's accounts."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    category = Column(String(100), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)


__all__ = [
    "CreditCardModel",
    "FixedPaymentModel",
    "InstallmentPaymentModel",
    "TRANSACTION_TYPE_EXPENSE",
    "TransactionModel",
]
