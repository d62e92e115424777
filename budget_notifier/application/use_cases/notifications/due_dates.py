"""Day-of-month arithmetic shared by the notification rules."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import Decimal

MONTH_NAMES = (
    "Ocak",
    "Şubat",
    "Mart",
    "Nisan",
    "Mayıs",
    "Haziran",
    "Temmuz",
    "Ağustos",
    "Eylül",
    "Ekim",
    "Kasım",
    "Aralık",
)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_until(current_day: int, due_day: int, month_length: int) -> int:
    """Return the days from ``current_day`` to the next ``due_day``.

    A due day earlier than today belongs to the next month, so the remaining
    days of the current month (``month_length``) are added to it.
    """

    if due_day >= current_day:
        return due_day - current_day
    return month_length - current_day + due_day


def days_until_due(as_of: date, due_day: int) -> int:
    return days_until(as_of.day, due_day, days_in_month(as_of.year, as_of.month))


def due_date_in_month(year: int, month: int, due_day: int) -> date:
    """Return the due date in the given month, clamped to the month's last day."""

    return date(year, month, min(due_day, days_in_month(year, month)))


def next_due_date(as_of: date, due_day: int) -> date:
    """Return the calendar date ``days_until_due`` points at."""

    return as_of + timedelta(days=days_until_due(as_of, due_day))


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def format_amount(value: Decimal) -> str:
    """Render a monetary amount with two decimals, e.g. ``5000.00``."""

    return f"{value:.2f}"


__all__ = [
    "MONTH_NAMES",
    "days_in_month",
    "days_until",
    "days_until_due",
    "due_date_in_month",
    "format_amount",
    "month_name",
    "next_due_date",
]
