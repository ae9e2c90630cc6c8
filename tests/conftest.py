"""Shared fixtures for the notification service tests."""

from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure the project root (which contains the ``studity`` package) is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# The engine is built at import time, so the environment must be ready first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["REMINDERS_ENABLED"] = "false"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from studity.application.use_cases.notifications import (  # noqa: E402
    NotificationMailer,
    NotificationService,
)
from studity.domain.entities import (  # noqa: E402
    BOOKING_STATUS_CONFIRMED,
    ROLE_STUDENT,
    ROLE_TEACHER,
    Booking,
    User,
)
from studity.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from studity.infrastructure.repositories import (  # noqa: E402
    BookingRepository,
    NotificationRepository,
    UserRepository,
)

CLIENT_URL = "https://studity.test"


class RecordingPublisher:
    """Stand-in for the websocket publisher that records every dispatch."""

    def __init__(self, connected=()):
        self.connected = set(connected)
        self.dispatched = []

    def is_connected(self, user_id):
        return user_id in self.connected

    def dispatch(self, notification):
        self.dispatched.append(notification)


class RecordingSender:
    """Email sender double returning ``result`` for every message."""

    def __init__(self, result=True):
        self.result = result
        self.sent = []

    def __call__(self, subject, html, recipient):
        self.sent.append((subject, html, recipient))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    @property
    def recipients(self):
        return [recipient for _, _, recipient in self.sent]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def database():
    """Create a fresh schema for every test."""

    initialize_database()
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def enforce_foreign_keys(database):
    """Return a callable switching on SQLite foreign key checks for the test."""

    def enable():
        with database.connect() as connection:
            connection.exec_driver_sql("PRAGMA foreign_keys=ON")

    yield enable
    with database.connect() as connection:
        connection.exec_driver_sql("PRAGMA foreign_keys=OFF")


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def mailer(sender):
    return NotificationMailer(SessionLocal, sender=sender, base_url=CLIENT_URL)


@pytest.fixture
def service(session, publisher, mailer):
    return NotificationService(session, publisher=publisher, mailer=mailer)


@pytest.fixture
def service_factory(publisher, mailer):
    def build(db):
        return NotificationService(db, publisher=publisher, mailer=mailer)

    return build


@pytest.fixture
def make_user(session):
    counter = {"value": 0}

    def create(name=None, role=ROLE_STUDENT, email=None, is_active=True) -> User:
        counter["value"] += 1
        index = counter["value"]
        return UserRepository(session).create(
            User(
                id=None,
                name=name or f"User {index}",
                email=email if email is not None else f"user{index}@example.com",
                role=role,
                is_active=is_active,
            )
        )

    return create


@pytest.fixture
def student(make_user):
    return make_user("Asha Student", ROLE_STUDENT, "asha@example.com")


@pytest.fixture
def teacher(make_user):
    return make_user("Ravi Teacher", ROLE_TEACHER, "ravi@example.com")


@pytest.fixture
def make_booking(session, student, teacher):
    def create(
        day: date,
        time: str = "10:00",
        status: str = BOOKING_STATUS_CONFIRMED,
        **overrides,
    ) -> Booking:
        values = dict(
            id=None,
            student_id=student.id,
            student_name=student.name,
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            subject="Mathematics",
            date=day,
            time=time,
            duration=1.0,
            status=status,
            amount=500.0,
            meeting_link="https://meet.example.com/abc",
        )
        values.update(overrides)
        return BookingRepository(session).create(Booking(**values))

    return create


def reload_notification(session, notification_id):
    """Return the stored notification, bypassing the session identity map."""

    session.expire_all()
    return NotificationRepository(session).get(notification_id)
