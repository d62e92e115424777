"""Tests for the day-of-month arithmetic."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from budget_notifier.application.use_cases.notifications.due_dates import (
    days_in_month,
    days_until,
    days_until_due,
    due_date_in_month,
    format_amount,
    month_name,
    next_due_date,
)


@pytest.mark.parametrize(
    ("current_day", "due_day", "month_length", "expected"),
    [
        (12, 15, 30, 3),
        (15, 15, 30, 0),
        (14, 15, 31, 1),
        (28, 2, 30, 4),
        (31, 1, 31, 1),
        (1, 31, 31, 30),
    ],
)
def test_days_until(current_day: int, due_day: int, month_length: int, expected: int) -> None:
    assert days_until(current_day, due_day, month_length) == expected


def test_days_until_stays_within_a_month() -> None:
    for current_day in range(1, 32):
        for due_day in range(1, 32):
            assert 0 <= days_until(current_day, due_day, 31) <= 30


def test_days_in_month_handles_leap_years() -> None:
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28


def test_due_date_is_clamped_to_month_end() -> None:
    assert due_date_in_month(2024, 2, 31) == date(2024, 2, 29)
    assert due_date_in_month(2024, 4, 31) == date(2024, 4, 30)
    assert due_date_in_month(2024, 5, 31) == date(2024, 5, 31)


def test_next_due_date_rolls_into_next_month() -> None:
    assert days_until_due(date(2024, 6, 28), 2) == 4
    assert next_due_date(date(2024, 6, 28), 2) == date(2024, 7, 2)
    assert next_due_date(date(2024, 12, 30), 3) == date(2025, 1, 3)


def test_month_name_and_amount_formatting() -> None:
    assert month_name(1) == "Ocak"
    assert month_name(6) == "Haziran"
    assert format_amount(Decimal("5000")) == "5000.00"
    assert format_amount(Decimal("12.5")) == "12.50"
