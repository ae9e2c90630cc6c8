"""Tests for the notification email templates."""

from __future__ import annotations

from datetime import date

from studity.application.use_cases.notifications import render_email
from studity.application.use_cases.notifications.templates import (
    BookingRejectedData,
    ClassReminderData,
)
from studity.domain.entities import Notification


def _notification(type_, data=None, **overrides):
    values = dict(
        id=1,
        recipient_id=1,
        title="Heads up",
        message="Something happened",
        type=type_,
        category="system",
        data=data or {},
    )
    values.update(overrides)
    return Notification(**values)


def test_payload_variant_uses_camel_case_and_drops_missing_fields():
    data = ClassReminderData(
        booking_id=7, subject="Physics", class_date=date(2025, 3, 12), reminder_type="24h"
    ).to_data()

    assert data == {
        "bookingId": 7,
        "subject": "Physics",
        "classDate": "2025-03-12",
        "reminderType": "24h",
    }


def test_missing_fields_render_placeholder():
    content = render_email(_notification("booking_pending"))

    assert content.subject == "📚 New Class Booking Request - Action Required"
    assert "<strong>Student:</strong> N/A" in content.html
    assert "<strong>Amount:</strong> N/A" in content.html


def test_booking_pending_formats_values_and_action_link():
    content = render_email(
        _notification(
            "booking_pending",
            {
                "studentName": "Asha",
                "subject": "Mathematics",
                "classDate": "2025-03-12T00:00:00",
                "classTime": "10:00",
                "amount": 500,
            },
            action_url="/teacher/bookings/3",
        ),
        base_url="https://studity.test/",
    )

    assert "<strong>Date:</strong> 12 Mar 2025" in content.html
    assert "<strong>Amount:</strong> ₹500" in content.html
    assert 'href="https://studity.test/teacher/bookings/3"' in content.html
    assert "Review Booking" in content.html


def test_rejected_refund_falls_back_to_amount():
    data = BookingRejectedData(amount=300).to_data()

    content = render_email(_notification("booking_rejected", data))

    assert "<strong>Refund Amount:</strong> ₹300" in content.html


def test_values_are_html_escaped():
    content = render_email(
        _notification("booking_approved", {"teacherName": "<script>alert(1)</script>"})
    )

    assert "<script>" not in content.html
    assert "&lt;script&gt;" in content.html


def test_message_and_unknown_types_use_generic_template():
    message = render_email(_notification("message"))
    general = render_email(_notification("general", title="Maintenance tonight"))

    assert message.subject == "New Message Received"
    assert general.subject == "Maintenance tonight"
    assert "Something happened" in general.html
    assert "Studity Team" in general.html


def test_refund_reason_defaults_when_missing():
    content = render_email(_notification("payment_refunded", {"refundAmount": 120}))

    assert "<strong>Reason:</strong> Booking cancelled" in content.html
    assert "View Transaction" not in content.html
