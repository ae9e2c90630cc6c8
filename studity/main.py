from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studity.application.use_cases.notifications import (
    ReminderService,
    shutdown_notification_mailer,
)
from studity.config import get_settings
from studity.infrastructure.database import SessionLocal, engine, initialize_database
from studity.infrastructure.scheduler import Scheduler
from studity.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database and start the reminder jobs; release both on exit."""

    initialize_database()
    reminders: ReminderService = app.state.reminder_service
    if app.state.reminders_enabled:
        reminders.scheduler.start()
        reminders.init()
    try:
        yield
    finally:
        if reminders.initialized:
            await reminders.shutdown()
        shutdown_notification_mailer()
        engine.dispose()


def create_app(
    *,
    reminder_service: ReminderService | None = None,
    reminders_enabled: bool | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="Studity notifications", lifespan=lifespan)
    app.state.reminder_service = reminder_service or ReminderService(
        SessionLocal, scheduler=Scheduler()
    )
    app.state.reminders_enabled = (
        settings.reminders_enabled if reminders_enabled is None else reminders_enabled
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
