"""Email provider abstraction and its SendGrid implementation."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


class EmailProviderError(Exception):
    """Raised by providers when a message could not be handed over."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class EmailMessage:
    """A fully rendered email ready to be sent."""

    from_address: str
    from_name: str
    to: str
    subject: str
    html: str
    text: str


class EmailProvider(Protocol):
    """Black-box send primitive used by the dispatcher."""

    def send(self, message: EmailMessage) -> str:
        """Send ``message`` and return the provider message id."""
        ...


def strip_html(html: str) -> str:
    """Return a plain text rendering of ``html`` for the text alternative."""

    return _WHITESPACE_PATTERN.sub(" ", _TAG_PATTERN.sub("", html)).strip()


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        try:
            return "; ".join(str(item) for item in parsed)
        except TypeError:
            return None

    return None


def _error_from_exception(exc: Exception) -> EmailProviderError:
    """Convert a SendGrid client exception into an :class:`EmailProviderError`."""

    status_code = getattr(exc, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error("SendGrid API request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.error("Error sending email via SendGrid: %s", exc)

    message = details or str(exc) or exc.__class__.__name__
    return EmailProviderError(message, status_code=status_code if isinstance(status_code, int) else None)


def _error_from_response(response: Any) -> EmailProviderError:
    """Convert an unsuccessful SendGrid response into an :class:`EmailProviderError`."""

    status_code = getattr(response, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))

    if details:
        logger.error("SendGrid API responded with status %s: %s", status_code, details)
    else:
        logger.error("SendGrid API responded with status %s", status_code)

    message = details or f"SendGrid API responded with status {status_code}"
    return EmailProviderError(message, status_code=status_code if isinstance(status_code, int) else None)


class SendGridEmailProvider:
    """Send emails through the SendGrid v3 REST API."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("A SendGrid API key is required")
        self._api_key = api_key

    def send(self, message: EmailMessage) -> str:
        mail = Mail(
            from_email=From(message.from_address, message.from_name),
            to_emails=message.to,
            subject=message.subject,
            html_content=message.html,
            plain_text_content=message.text,
        )

        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(mail)
        except Exception as exc:
            raise _error_from_exception(exc) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise _error_from_response(response)

        headers = getattr(response, "headers", None) or {}
        return str(headers.get("X-Message-Id") or "")


__all__ = [
    "EmailMessage",
    "EmailProvider",
    "EmailProviderError",
    "SendGridEmailProvider",
    "strip_html",
]
