"""Tests for the booking, payment and reminder notification wrappers."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date

import pytest

from conftest import reload_notification
from studity.application.use_cases.notifications import (
    NotificationService,
    notify_booking_approved,
    notify_booking_pending,
    notify_booking_rejected,
    notify_payment_received,
    notify_refund_processed,
    send_class_reminder,
)
from studity.domain.entities import (
    PAYMENT_STATUS_COMPLETED,
    PAYMENT_STATUS_PENDING,
    Payment,
)
from studity.infrastructure.notifications import (
    NEW_NOTIFICATION_EVENT,
    NotificationConnectionManager,
    NotificationPublisher,
)
from studity.infrastructure.repositories import NotificationRepository, PaymentRepository

CLASS_DAY = date(2025, 3, 12)


def _payment(session, booking, status=PAYMENT_STATUS_COMPLETED, **overrides):
    values = dict(
        id=None,
        user_id=booking.student_id,
        teacher_id=booking.teacher_id,
        booking_id=booking.id,
        amount=500.0,
        status=status,
        platform_fee=50.0,
        teacher_earning=450.0,
    )
    values.update(overrides)
    return PaymentRepository(session).create(Payment(**values))


def test_booking_pending_notifies_teacher(service, make_booking, teacher, sender):
    booking = make_booking(CLASS_DAY)

    notification = notify_booking_pending(service, booking)

    assert notification.recipient_id == teacher.id
    assert notification.type == "booking_pending"
    assert notification.priority == "high"
    assert notification.action_required is True
    assert notification.action_url == f"/teacher/bookings/{booking.id}"
    assert notification.data == {
        "bookingId": booking.id,
        "studentId": booking.student_id,
        "studentName": "Asha Student",
        "subject": "Mathematics",
        "classDate": "2025-03-12",
        "classTime": "10:00",
        "amount": 500.0,
    }
    assert sender.recipients == [teacher.email]


def test_booking_approved_also_reports_completed_payment(
    service, session, make_booking, student, teacher
):
    booking = make_booking(CLASS_DAY)
    _payment(session, booking)

    notification = notify_booking_approved(service, booking)

    assert notification.recipient_id == student.id
    assert notification.data["meetingLink"] == "https://meet.example.com/abc"
    teacher_notifications = NotificationRepository(session).list_for_recipient(teacher.id)
    assert [item.type for item in teacher_notifications] == ["payment_received"]
    assert teacher_notifications[0].message.startswith("You've received a payment of ₹450")


def test_booking_approved_skips_pending_payment(service, session, make_booking, teacher):
    booking = make_booking(CLASS_DAY)
    _payment(session, booking, status=PAYMENT_STATUS_PENDING)

    notify_booking_approved(service, booking, teacher_name="Prof. Ravi")

    assert NotificationRepository(session).count_for_recipient(teacher.id) == 0


def test_booking_rejected_defaults_refund_to_booking_amount(service, make_booking, student):
    booking = make_booking(CLASS_DAY, amount=750.0)

    notification = notify_booking_rejected(service, booking)

    assert notification.recipient_id == student.id
    assert notification.action_url == "/student/teachers"
    assert notification.data["refundAmount"] == 750.0
    assert "Ravi Teacher couldn't approve" in notification.message


def test_payment_received_uses_booking_subject(service, session, make_booking, teacher):
    booking = make_booking(CLASS_DAY, subject="Chemistry")
    payment = _payment(session, booking)

    notification = notify_payment_received(
        service, payment, student_name="Asha Student", booking=booking
    )

    assert notification.recipient_id == teacher.id
    assert notification.data["subject"] == "Chemistry"
    assert notification.data["teacherEarning"] == 450.0


def test_refund_processed_falls_back_to_payment_amount(service, session, make_booking, student):
    booking = make_booking(CLASS_DAY)
    payment = _payment(session, booking, amount=620.5, refund_amount=None)

    notification = notify_refund_processed(service, payment)

    assert notification.recipient_id == student.id
    assert notification.data["refundAmount"] == 620.5
    assert notification.data["refundReason"] == "Booking cancelled"
    assert "₹620.50" in notification.message


def test_one_hour_reminder_notifies_both_without_email(service, make_booking, student, teacher, sender):
    booking = make_booking(CLASS_DAY)

    sent = send_class_reminder(service, booking, "1h")

    assert [item.recipient_id for item in sent] == [student.id, teacher.id]
    assert {item.priority for item in sent} == {"high"}
    assert sent[0].title == "Class Reminder - 1 hour to go!"
    assert "with Ravi Teacher starts in 1 hour" in sent[0].message
    assert "with Asha Student starts in 1 hour" in sent[1].message
    assert sent[0].data["reminderType"] == "1h"
    assert sender.sent == []


def test_day_ahead_reminder_is_emailed(service, make_booking, student, teacher, sender):
    booking = make_booking(CLASS_DAY)

    sent = send_class_reminder(service, booking, "24h")

    assert {item.priority for item in sent} == {"medium"}
    assert sorted(sender.recipients) == sorted([student.email, teacher.email])


def test_reminder_failure_for_one_participant_does_not_block_other(
    service, make_booking, student, teacher, monkeypatch
):
    booking = make_booking(CLASS_DAY)
    original = service.create_notification

    def flaky(**kwargs):
        if kwargs["recipient_id"] == student.id:
            raise RuntimeError("database hiccup")
        return original(**kwargs)

    monkeypatch.setattr(service, "create_notification", flaky)

    sent = send_class_reminder(service, booking, "1h")

    assert [item.recipient_id for item in sent] == [teacher.id]


def test_wrapper_failure_is_logged_not_raised(service, make_booking, monkeypatch, caplog):
    booking = make_booking(CLASS_DAY)

    def broken(**kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "create_notification", broken)

    with caplog.at_level("ERROR"):
        assert notify_booking_pending(service, booking) is None

    assert "Error sending booking pending notification" in caplog.text


@pytest.mark.anyio
async def test_booking_pending_reaches_connected_teacher(
    session, mailer, make_booking, teacher, sender
):
    manager = NotificationConnectionManager()
    socket = _FakeWebSocket()
    await manager.connect(teacher.id, socket)
    service = NotificationService(
        session, publisher=NotificationPublisher(manager), mailer=mailer
    )
    booking = make_booking(CLASS_DAY)

    notification = notify_booking_pending(service, booking)
    for _ in range(5):
        await asyncio.sleep(0)

    assert len(socket.sent) == 1
    message = socket.sent[0]
    assert message["type"] == NEW_NOTIFICATION_EVENT
    assert message["data"]["id"] == notification.id
    assert message["data"]["actionRequired"] is True
    assert message["data"]["actionUrl"] == f"/teacher/bookings/{booking.id}"
    assert sender.recipients == [teacher.email]
    assert reload_notification(session, notification.id).email_sent is True


def test_reminder_database_failure_for_one_participant_does_not_block_other(
    service, session, make_booking, teacher, enforce_foreign_keys
):
    booking = replace(make_booking(CLASS_DAY), student_id=99999)
    enforce_foreign_keys()

    sent = send_class_reminder(service, booking, "1h")

    assert [item.recipient_id for item in sent] == [teacher.id]
    assert NotificationRepository(session).count_for_recipient(teacher.id) == 1


def test_booking_approved_still_reports_payment_after_student_insert_fails(
    service, session, make_booking, teacher, enforce_foreign_keys
):
    booking = make_booking(CLASS_DAY, student_id=99999)
    _payment(session, booking)
    enforce_foreign_keys()

    assert notify_booking_approved(service, booking) is None

    teacher_notifications = NotificationRepository(session).list_for_recipient(teacher.id)
    assert [item.type for item in teacher_notifications] == ["payment_received"]


class _FakeWebSocket:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def accept(self) -> None:
        pass

    async def send_json(self, message: dict) -> None:
        self.sent.append(message)
