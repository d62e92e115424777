"""HTML bodies of the emails sent to users."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Sequence

from budget_notifier.domain.entities import (
    PRIORITY_HIGH,
    Notification,
    NotificationPayload,
    OverdueCreditCardPayload,
    OverdueFixedPaymentPayload,
    OverdueInstallmentPayload,
)

from ..notifications.due_dates import format_amount, month_name

EMAIL_TYPE_TEST = "test"
EMAIL_TYPE_DAILY_DIGEST = "daily_digest"
EMAIL_TYPE_CRITICAL_ALERT = "critical_alert"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def _format_day(day: date) -> str:
    return f"{day.day} {month_name(day.month)} {day.year}"


def render_test_email(user_name: str) -> RenderedEmail:
    html_content = "".join(
        (
            f"<p>Merhaba {escape(user_name)},</p>",
            "<p>Bu bir test e-postasıdır. E-posta bildirimleriniz doğru şekilde çalışıyor.</p>",
            "<p>Budget App</p>",
        )
    )
    return RenderedEmail(subject="Test E-postası - Budget App", html=html_content)


def render_daily_digest(
    user_name: str, notifications: Sequence[Notification], day: date
) -> RenderedEmail:
    """Render the list of today's notifications, high priority entries first."""

    ordered = sorted(
        notifications, key=lambda item: (item.priority != PRIORITY_HIGH, item.id or 0)
    )
    items: list[str] = []
    for notification in ordered:
        title = escape(notification.title)
        if notification.priority == PRIORITY_HIGH:
            title = f"<strong>{title}</strong>"
        items.append(f"<li>{title}<br>{escape(notification.message)}</li>")

    html_content = "".join(
        (
            f"<p>Merhaba {escape(user_name)},</p>",
            f"<p>{_format_day(day)} tarihli bildirimleriniz:</p>",
            f"<ul>{''.join(items)}</ul>",
            "<p>Detaylar için uygulamayı ziyaret edebilirsiniz.</p>",
        )
    )
    subject = f"Günlük Özet - {len(notifications)} bildirim"
    return RenderedEmail(subject=subject, html=html_content)


def _overdue_details(payload: NotificationPayload) -> list[str]:
    if isinstance(payload, OverdueFixedPaymentPayload):
        return [
            f"<strong>Ödeme:</strong> {escape(payload.payment_name)}",
            f"<strong>Tutar:</strong> {format_amount(payload.amount)} TL",
            f"<strong>Son ödeme tarihi:</strong> {_format_day(payload.due_date)}",
            f"<strong>Gecikme:</strong> {payload.days_overdue} gün",
        ]
    if isinstance(payload, OverdueCreditCardPayload):
        return [
            f"<strong>Kart:</strong> {escape(payload.card_name)}",
            f"<strong>Minimum ödeme:</strong> {format_amount(payload.minimum_payment)} TL",
            f"<strong>Toplam borç:</strong> {format_amount(payload.current_balance)} TL",
            f"<strong>Son ödeme tarihi:</strong> {_format_day(payload.due_date)}",
            f"<strong>Gecikme:</strong> {payload.days_overdue} gün",
        ]
    if isinstance(payload, OverdueInstallmentPayload):
        return [
            f"<strong>Ürün:</strong> {escape(payload.item_name)}",
            (
                f"<strong>Taksit:</strong> {payload.installment_number}/"
                f"{payload.total_installments}"
            ),
            f"<strong>Tutar:</strong> {format_amount(payload.installment_amount)} TL",
            f"<strong>Son ödeme tarihi:</strong> {_format_day(payload.due_date)}",
            f"<strong>Gecikme:</strong> {payload.days_overdue} gün",
        ]
    return []


def render_critical_alert(
    user_name: str, notification: Notification, payload: NotificationPayload
) -> RenderedEmail:
    details = "<br>".join(_overdue_details(payload))
    html_content = "".join(
        (
            f"<p>Merhaba {escape(user_name)},</p>",
            f"<p><strong>{escape(notification.title)}</strong></p>",
            f"<p>{escape(notification.message)}</p>",
            f"<p>{details}</p>" if details else "",
            "<p>Ek gecikme ücretlerinden kaçınmak için ödemenizi en kısa sürede yapmanızı öneririz.</p>",
        )
    )
    return RenderedEmail(subject=f"Acil: {notification.title}", html=html_content)


__all__ = [
    "EMAIL_TYPE_CRITICAL_ALERT",
    "EMAIL_TYPE_DAILY_DIGEST",
    "EMAIL_TYPE_TEST",
    "RenderedEmail",
    "render_critical_alert",
    "render_daily_digest",
    "render_test_email",
]
