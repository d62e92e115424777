import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from budget_notifier.application.use_cases.emails import send_daily_digests
from budget_notifier.application.use_cases.notifications import (
    DailyRunInProgressError,
    get_daily_notification_job,
)
from budget_notifier.config import get_settings
from budget_notifier.infrastructure.database import SessionLocal, engine, initialize_database
from budget_notifier.infrastructure.email_dispatcher import get_email_dispatcher
from budget_notifier.infrastructure.scheduler import build_scheduler
from budget_notifier.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def run_scheduled_notifications() -> None:
    try:
        get_daily_notification_job().run()
    except DailyRunInProgressError:
        logger.warning("Skipping scheduled notification run; a run is already in progress")


def run_scheduled_digests() -> None:
    send_daily_digests(SessionLocal, get_email_dispatcher())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database and scheduler on startup and release them on shutdown."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    initialize_database()

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = build_scheduler(settings, run_scheduled_notifications, run_scheduled_digests)
        scheduler.start()
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Budget Notifier", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
