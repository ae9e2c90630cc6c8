"""Tests for the class reminder scheduler jobs."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from studity.application.use_cases.notifications import (
    BookingNotConfirmedError,
    BookingNotFoundError,
    ReminderError,
    ReminderService,
)
from studity.domain.entities import BOOKING_STATUS_PENDING
from studity.infrastructure.repositories import NotificationRepository, ReminderLogRepository
from studity.infrastructure.scheduler import Scheduler

NOW = datetime(2025, 3, 12, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture
def reminders(session_factory, service_factory):
    return ReminderService(
        session_factory,
        service_factory=service_factory,
        scheduler=Scheduler(),
        dedupe=True,
    )


def _reminders_for(session, user_id):
    session.expire_all()
    return [
        item
        for item in NotificationRepository(session).list_for_recipient(user_id, limit=None)
        if item.type == "class_reminder"
    ]


@pytest.mark.parametrize(
    ("class_time", "expected"),
    [
        ("09:45", 0),
        ("09:48", 0),
        ("09:50", 1),
        ("10:00", 1),
        ("10:12", 1),
        ("10:15", 0),
    ],
)
def test_upcoming_check_window(reminders, make_booking, class_time, expected):
    make_booking(TODAY, class_time)

    assert reminders.run_upcoming_check(NOW) == expected


@pytest.mark.parametrize(
    ("class_time", "expected"),
    [
        ("09:45", 0),
        ("09:46", 1),
        ("10:15", 1),
        ("10:16", 0),
    ],
)
def test_one_hour_window(reminders, make_booking, class_time, expected):
    make_booking(TODAY, class_time)

    assert reminders.run_one_hour_reminders(NOW) == expected


def test_upcoming_check_ignores_unconfirmed_bookings(reminders, make_booking, session, student):
    make_booking(TODAY, "10:00", status=BOOKING_STATUS_PENDING)

    assert reminders.run_upcoming_check(NOW) == 0
    assert _reminders_for(session, student.id) == []


def test_upcoming_check_skips_bookings_with_invalid_time(reminders, make_booking):
    make_booking(TODAY, "10:00")
    make_booking(TODAY, "25:99")

    assert reminders.run_upcoming_check(NOW) == 1


def test_reminder_reaches_both_participants(reminders, make_booking, session, student, teacher):
    make_booking(TODAY, "10:00")

    reminders.run_upcoming_check(NOW)

    for user in (student, teacher):
        [reminder] = _reminders_for(session, user.id)
        assert reminder.priority == "high"
        assert reminder.title == "Class Reminder - 1 hour to go!"


def test_repeated_ticks_send_once_with_dedupe(reminders, make_booking, session, student):
    booking = make_booking(TODAY, "10:00")

    reminders.run_upcoming_check(NOW)
    reminders.run_upcoming_check(NOW + timedelta(minutes=5))
    reminders.run_one_hour_reminders(NOW)

    assert len(_reminders_for(session, student.id)) == 1
    assert ReminderLogRepository(session).exists(booking.id, "1h")


def test_repeated_ticks_duplicate_without_dedupe(
    session_factory, service_factory, make_booking, session, student
):
    reminders = ReminderService(
        session_factory, service_factory=service_factory, scheduler=Scheduler(), dedupe=False
    )
    make_booking(TODAY, "10:00")

    reminders.run_upcoming_check(NOW)
    reminders.run_upcoming_check(NOW + timedelta(minutes=5))

    assert len(_reminders_for(session, student.id)) == 2


def test_day_ahead_reminders_cover_tomorrow_only(
    reminders, make_booking, session, student, teacher, sender
):
    make_booking(TOMORROW, "08:00")
    make_booking(TOMORROW, "18:30")
    make_booking(TOMORROW, "12:00", status=BOOKING_STATUS_PENDING)
    make_booking(TOMORROW + timedelta(days=1), "12:00")
    make_booking(TODAY, "12:00")

    assert reminders.run_day_ahead_reminders(NOW) == 2

    reminders_sent = _reminders_for(session, student.id)
    assert len(reminders_sent) == 2
    assert {item.priority for item in reminders_sent} == {"medium"}
    assert {item.data["reminderType"] for item in reminders_sent} == {"24h"}
    assert sorted(sender.recipients) == sorted([student.email, teacher.email] * 2)


def test_failing_booking_does_not_stop_scan(
    reminders, make_booking, session, student, monkeypatch
):
    from studity.application.use_cases.notifications import reminders as reminders_module

    first = make_booking(TODAY, "10:00")
    make_booking(TODAY, "10:05")
    original = reminders_module.send_class_reminder

    def flaky(service, booking, reminder_type):
        if booking.id == first.id:
            raise RuntimeError("unexpected")
        return original(service, booking, reminder_type)

    monkeypatch.setattr(reminders_module, "send_class_reminder", flaky)

    assert reminders.run_upcoming_check(NOW) == 1


def test_database_error_on_one_booking_does_not_stop_scan(
    reminders, make_booking, session, student, teacher, enforce_foreign_keys
):
    make_booking(TODAY, "10:00", student_id=99999)
    make_booking(TODAY, "10:05")
    enforce_foreign_keys()

    assert reminders.run_upcoming_check(NOW) == 2

    assert len(_reminders_for(session, student.id)) == 1
    assert len(_reminders_for(session, teacher.id)) == 2


def test_undelivered_reminder_is_retried_on_next_tick(
    reminders, make_booking, session, student, monkeypatch
):
    from studity.application.use_cases.notifications import reminders as reminders_module

    booking = make_booking(TODAY, "10:00")
    monkeypatch.setattr(reminders_module, "send_class_reminder", lambda *args: [])

    assert reminders.run_upcoming_check(NOW) == 0
    assert not ReminderLogRepository(session).exists(booking.id, "1h")

    monkeypatch.undo()

    assert reminders.run_one_hour_reminders(NOW) == 1
    assert len(_reminders_for(session, student.id)) == 1
    session.expire_all()
    assert ReminderLogRepository(session).exists(booking.id, "1h")


def test_raising_reminder_releases_marker(reminders, make_booking, session, monkeypatch):
    from studity.application.use_cases.notifications import reminders as reminders_module

    booking = make_booking(TODAY, "10:00")

    def broken(service, booking, reminder_type):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(reminders_module, "send_class_reminder", broken)

    assert reminders.run_upcoming_check(NOW) == 0
    assert not ReminderLogRepository(session).exists(booking.id, "1h")


@pytest.mark.anyio
async def test_async_tick_runs_in_worker_thread(reminders, make_booking, session, student):
    make_booking(TODAY, "10:00")

    sent = await reminders.check_upcoming_classes(NOW)

    assert sent == 1
    assert len(_reminders_for(session, student.id)) == 1


def test_cleanup_job_uses_retention(session_factory, service_factory, monkeypatch):
    reminders = ReminderService(
        session_factory, service_factory=service_factory, scheduler=Scheduler(), retention_days=7
    )
    calls = []

    def fake_cleanup(self, days_old=30, *, now=None):
        calls.append((days_old, now))
        return 4

    from studity.application.use_cases.notifications.service import NotificationService

    monkeypatch.setattr(NotificationService, "cleanup_old_notifications", fake_cleanup)

    assert reminders.run_cleanup(NOW) == 4
    assert calls == [(7, NOW)]


def test_manual_reminder_requires_existing_confirmed_booking(reminders, make_booking):
    pending = make_booking(TODAY, "10:00", status=BOOKING_STATUS_PENDING)

    with pytest.raises(BookingNotFoundError):
        reminders.send_manual_reminder(9999)
    with pytest.raises(BookingNotConfirmedError):
        reminders.send_manual_reminder(pending.id)
    with pytest.raises(ReminderError):
        reminders.send_manual_reminder(pending.id, "2h")


def test_manual_reminder_bypasses_dedupe_and_records_marker(
    reminders, make_booking, session, student
):
    booking = make_booking(TOMORROW, "15:00")
    ReminderLogRepository(session).claim(booking.id, "1h")

    sent = reminders.send_manual_reminder(booking.id)

    assert len(sent) == 2
    assert len(_reminders_for(session, student.id)) == 1
    assert ReminderLogRepository(session).exists(booking.id, "1h")

    reminders.send_manual_reminder(booking.id, "24h")
    assert ReminderLogRepository(session).exists(booking.id, "24h")


def test_reminder_stats_counts_confirmed_bookings(reminders, make_booking):
    make_booking(TODAY, "18:00")
    make_booking(TOMORROW, "10:00")
    make_booking(TODAY + timedelta(days=5), "10:00")
    make_booking(TODAY + timedelta(days=8), "10:00")
    make_booking(TOMORROW, "11:00", status=BOOKING_STATUS_PENDING)

    stats = reminders.get_reminder_stats(NOW)

    assert stats.upcoming_today == 1
    assert stats.upcoming_tomorrow == 1
    assert stats.upcoming_this_week == 3
    assert stats.last_checked == NOW


@pytest.mark.anyio
async def test_init_registers_jobs_once(reminders):
    reminders.scheduler.start()
    try:
        reminders.init()
        reminders.init()

        assert set(reminders.scheduler.jobs) == {
            "check_upcoming_classes",
            "send_day_ahead_reminders",
            "send_one_hour_reminders",
            "cleanup_notifications",
        }
    finally:
        await reminders.shutdown()

    assert reminders.initialized is False
