"""Unit tests for the SendGrid email provider."""

from __future__ import annotations

import json
import types

import pytest

from budget_notifier.infrastructure import email as email_module
from budget_notifier.infrastructure.email import (
    EmailMessage,
    EmailProviderError,
    SendGridEmailProvider,
    strip_html,
)

MESSAGE = EmailMessage(
    from_address="notifications@example.com",
    from_name="Budget App",
    to="user@example.com",
    subject="Subject",
    html="<p>Body</p>",
    text="Body",
)


class _FakeClient:
    response = types.SimpleNamespace(
        status_code=202, body=None, headers={"X-Message-Id": "sg-123"}
    )
    sent: list = []

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        self.sent.append(message)
        return self.response


def test_provider_requires_api_key() -> None:
    with pytest.raises(ValueError):
        SendGridEmailProvider("")


def test_send_returns_message_id(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful SendGrid response should yield the provider message id."""

    class SuccessfulClient(_FakeClient):
        sent: list = []

    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    assert SendGridEmailProvider("SG.fake").send(MESSAGE) == "sg-123"
    mail = SuccessfulClient.sent[0].get()
    assert mail["from"] == {"email": "notifications@example.com", "name": "Budget App"}
    assert mail["subject"] == "Subject"


def test_send_raises_on_unsuccessful_status(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class ThrottledClient(_FakeClient):
        response = types.SimpleNamespace(
            status_code=429,
            body=json.dumps({"errors": [{"message": "Too many requests"}]}),
            headers={},
        )

    monkeypatch.setattr(email_module, "SendGridAPIClient", ThrottledClient)

    with caplog.at_level("ERROR"), pytest.raises(EmailProviderError) as excinfo:
        SendGridEmailProvider("SG.fake").send(MESSAGE)

    assert excinfo.value.status_code == 429
    assert str(excinfo.value) == "Too many requests"
    assert "status 429" in caplog.text


def test_send_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/API_Reference/Web_API_v3/How_To_Use_The_Web_API_v3/authentication.html",
                    }
                ]
            }
        ).encode()

    class FailingClient(_FakeClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"), pytest.raises(EmailProviderError) as excinfo:
        SendGridEmailProvider("SG.fake").send(MESSAGE)

    assert excinfo.value.status_code == 403
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_transport_errors_have_no_status(monkeypatch: pytest.MonkeyPatch) -> None:
    class UnreachableClient(_FakeClient):
        def send(self, message):
            raise ConnectionError("connection refused")

    monkeypatch.setattr(email_module, "SendGridAPIClient", UnreachableClient)

    with pytest.raises(EmailProviderError) as excinfo:
        SendGridEmailProvider("SG.fake").send(MESSAGE)

    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_strip_html() -> None:
    assert strip_html("<p>Merhaba</p>\n<ul><li>Kira</li></ul>") == "Merhaba Kira"
    assert strip_html("<p>Merhaba</p> <p>dünya</p>") == "Merhaba dünya"
