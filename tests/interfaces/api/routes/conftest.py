"""Fixtures building a FastAPI test client over the in-memory database."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from budget_notifier.application.use_cases.notifications import DailyNotificationJob
from budget_notifier.infrastructure.email_dispatcher import EmailDispatcher
from budget_notifier.interfaces.api.dependencies import (
    get_db,
    get_dispatcher,
    get_notification_job,
)


class StubProvider:
    def __init__(self) -> None:
        self.messages = []

    def send(self, message) -> str:
        self.messages.append(message)
        return "sg-1"


@pytest.fixture()
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture()
def dispatcher(provider, session_factory, settings) -> EmailDispatcher:
    return EmailDispatcher(provider, session_factory, settings=settings)


@pytest.fixture()
def job(session_factory, settings) -> DailyNotificationJob:
    return DailyNotificationJob(session_factory, settings=settings)


@pytest.fixture()
def client(session_factory, dispatcher, job):
    """Return a client whose dependencies use the test database.

    The client is not entered as a context manager so the lifespan, which
    touches the configured database and starts the scheduler, does not run.
    """

    from main import create_app

    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_notification_job] = lambda: job
    return TestClient(app)
