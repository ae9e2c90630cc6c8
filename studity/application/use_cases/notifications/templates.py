"""Typed notification payloads and the email templates rendered from them.

Each notification type owns one payload variant carrying only the fields its
email reads. Every field is optional: a missing value renders as ``N/A``
instead of failing the send.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from html import escape
from typing import Any, Callable, Mapping

from studity.domain.entities import (
    NOTIFICATION_TYPE_BOOKING_APPROVED,
    NOTIFICATION_TYPE_BOOKING_PENDING,
    NOTIFICATION_TYPE_BOOKING_REJECTED,
    NOTIFICATION_TYPE_CLASS_REMINDER,
    NOTIFICATION_TYPE_MESSAGE,
    NOTIFICATION_TYPE_PAYMENT_RECEIVED,
    NOTIFICATION_TYPE_PAYMENT_REFUNDED,
    Notification,
)

PLACEHOLDER = "N/A"
DEFAULT_REFUND_REASON = "Booking cancelled"


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


class NotificationData:
    """Base class for the per-type payload variants."""

    def to_data(self) -> dict[str, Any]:
        """Return the JSON snapshot stored on the notification."""

        return {
            _camel(item.name): _json_value(getattr(self, item.name))
            for item in fields(self)
            if getattr(self, item.name) is not None
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None):
        data = data or {}
        return cls(**{item.name: data.get(_camel(item.name)) for item in fields(cls)})


@dataclass
class BookingPendingData(NotificationData):
    booking_id: Any = None
    student_id: Any = None
    student_name: str | None = None
    subject: str | None = None
    class_date: Any = None
    class_time: str | None = None
    amount: Any = None


@dataclass
class BookingApprovedData(NotificationData):
    booking_id: Any = None
    teacher_id: Any = None
    teacher_name: str | None = None
    subject: str | None = None
    class_date: Any = None
    class_time: str | None = None
    meeting_link: str | None = None


@dataclass
class BookingRejectedData(NotificationData):
    booking_id: Any = None
    teacher_id: Any = None
    teacher_name: str | None = None
    subject: str | None = None
    class_date: Any = None
    class_time: str | None = None
    amount: Any = None
    refund_amount: Any = None


@dataclass
class PaymentReceivedData(NotificationData):
    payment_id: Any = None
    booking_id: Any = None
    student_name: str | None = None
    subject: str | None = None
    class_date: Any = None
    amount: Any = None
    platform_fee: Any = None
    teacher_earning: Any = None


@dataclass
class PaymentRefundedData(NotificationData):
    payment_id: Any = None
    booking_id: Any = None
    refund_amount: Any = None
    refund_reason: str | None = None


@dataclass
class ClassReminderData(NotificationData):
    booking_id: Any = None
    subject: str | None = None
    class_date: Any = None
    class_time: str | None = None
    meeting_link: str | None = None
    reminder_type: str | None = None


@dataclass
class GenericData(NotificationData):
    """Payload for types whose email only shows the title and message."""


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _text(value: Any, default: str = PLACEHOLDER) -> str:
    if value is None or value == "":
        return default
    return escape(str(value))


def _money(value: Any) -> str:
    text = _text(value)
    return text if text == PLACEHOLDER else f"₹{text}"


def _date(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, (datetime, date)):
        parsed = value
    else:
        try:
            parsed = date.fromisoformat(str(value)[:10])
        except ValueError:
            return _text(value)
    return parsed.strftime("%d %b %Y")


def _row(label: str, value: str) -> str:
    return f"<p><strong>{label}:</strong> {value}</p>"


def _link_row(label: str, url: Any) -> str:
    if not url:
        return ""
    safe = escape(str(url), quote=True)
    return f'<p><strong>{label}:</strong> <a href="{safe}">{safe}</a></p>'


def _layout(
    *,
    heading: str,
    color: str,
    paragraphs: list[str],
    rows: list[str] | None = None,
    background: str = "#f8fafc",
    closing: list[str] | None = None,
    action_label: str | None = None,
    action_url: str | None = None,
    base_url: str = "",
) -> str:
    parts = [
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
        f'<h2 style="color: {color};">{heading}</h2>',
    ]
    parts.extend(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    if rows:
        parts.append(
            f'<div style="background: {background}; padding: 20px; '
            f'border-radius: 8px; margin: 20px 0;">'
        )
        parts.extend(row for row in rows if row)
        parts.append("</div>")
    parts.extend(f"<p>{paragraph}</p>" for paragraph in closing or [])
    if action_label and action_url:
        href = escape(f"{base_url.rstrip('/')}{action_url}", quote=True)
        parts.append(
            f'<a href="{href}" style="background: {color}; color: white; '
            f"padding: 12px 24px; text-decoration: none; border-radius: 6px; "
            f'display: inline-block;">{action_label}</a>'
        )
    parts.append(
        '<p style="margin-top: 30px; color: #64748b; font-size: 14px;">'
        "Best regards,<br>Studity Team</p>"
    )
    parts.append("</div>")
    return "".join(parts)


def _booking_pending(
    notification: Notification, data: BookingPendingData, base_url: str
) -> EmailContent:
    return EmailContent(
        subject="📚 New Class Booking Request - Action Required",
        html=_layout(
            heading="New Class Booking Request",
            color="#7c3aed",
            paragraphs=[
                "Hello,",
                "You have received a new class booking request that requires your approval.",
            ],
            rows=[
                _row("Student", _text(data.student_name)),
                _row("Subject", _text(data.subject)),
                _row("Date", _date(data.class_date)),
                _row("Time", _text(data.class_time)),
                _row("Amount", _money(data.amount)),
            ],
            closing=["Please review and approve or reject this booking request."],
            action_label="Review Booking",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _booking_approved(
    notification: Notification, data: BookingApprovedData, base_url: str
) -> EmailContent:
    return EmailContent(
        subject="✅ Class Booking Approved - Ready to Learn!",
        html=_layout(
            heading="Your Class Booking is Approved!",
            color="#10b981",
            background="#f0fdf4",
            paragraphs=["Great news! Your class booking has been approved by your teacher."],
            rows=[
                _row("Teacher", _text(data.teacher_name)),
                _row("Subject", _text(data.subject)),
                _row("Date", _date(data.class_date)),
                _row("Time", _text(data.class_time)),
                _link_row("Meeting Link", data.meeting_link),
            ],
            closing=["Get ready for your learning session!"],
            action_label="View Details",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _booking_rejected(
    notification: Notification, data: BookingRejectedData, base_url: str
) -> EmailContent:
    refund = data.refund_amount if data.refund_amount is not None else data.amount
    return EmailContent(
        subject="❌ Class Booking Not Approved - Refund Initiated",
        html=_layout(
            heading="Class Booking Update",
            color="#ef4444",
            background="#fef2f2",
            paragraphs=[
                "We regret to inform you that your class booking request was not "
                "approved by the teacher."
            ],
            rows=[
                _row("Teacher", _text(data.teacher_name)),
                _row("Subject", _text(data.subject)),
                _row("Date", _date(data.class_date)),
                _row("Refund Amount", _money(refund)),
            ],
            closing=[
                "Don't worry! Your payment has been refunded and will be processed "
                "within 3-5 business days.",
                "You can explore other teachers and book again anytime.",
            ],
            action_label="Find Other Teachers",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _payment_received(
    notification: Notification, data: PaymentReceivedData, base_url: str
) -> EmailContent:
    return EmailContent(
        subject="💰 Payment Received for Class Booking",
        html=_layout(
            heading="Payment Received Successfully",
            color="#10b981",
            background="#f0fdf4",
            paragraphs=["Great! You have received a payment for an approved class booking."],
            rows=[
                _row("Student", _text(data.student_name)),
                _row("Subject", _text(data.subject)),
                _row("Date", _date(data.class_date)),
                _row("Amount Received", _money(data.amount)),
                _row("Platform Fee", _money(data.platform_fee)),
                _row("Your Earning", _money(data.teacher_earning)),
            ],
            closing=["The amount will be transferred to your account as per the payment schedule."],
            action_label="View Earnings",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _payment_refunded(
    notification: Notification, data: PaymentRefundedData, base_url: str
) -> EmailContent:
    return EmailContent(
        subject="💸 Refund Processed - Amount Credited",
        html=_layout(
            heading="Refund Processed Successfully",
            color="#f59e0b",
            background="#fffbeb",
            paragraphs=[
                "Your refund has been processed and will be credited to your account shortly."
            ],
            rows=[
                _row("Booking ID", _text(data.booking_id)),
                _row("Refund Amount", _money(data.refund_amount)),
                _row("Reason", _text(data.refund_reason, DEFAULT_REFUND_REASON)),
                _row("Processing Time", "3-5 business days"),
            ],
            closing=[
                "If you have any questions about this refund, please contact our support team."
            ],
            action_label="View Transaction",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _class_reminder(
    notification: Notification, data: ClassReminderData, base_url: str
) -> EmailContent:
    return EmailContent(
        subject="⏰ Class Reminder - Starting Soon!",
        html=_layout(
            heading="Class Reminder",
            color="#7c3aed",
            paragraphs=["This is a reminder that your class is starting soon!"],
            rows=[
                _row("Subject", _text(data.subject)),
                _row("Date", _date(data.class_date)),
                _row("Time", _text(data.class_time)),
                _link_row("Meeting Link", data.meeting_link),
            ],
            closing=["Make sure you're ready and have all necessary materials!"],
            action_label="Join Class",
            action_url=notification.action_url,
            base_url=base_url,
        ),
    )


def _message(notification: Notification, data: GenericData, base_url: str) -> EmailContent:
    return EmailContent(
        subject="New Message Received",
        html=_generic_html(notification),
    )


def _generic(notification: Notification, data: GenericData, base_url: str) -> EmailContent:
    return EmailContent(
        subject=notification.title,
        html=_generic_html(notification),
    )


def _generic_html(notification: Notification) -> str:
    return _layout(
        heading=_text(notification.title, ""),
        color="#111827",
        paragraphs=[_text(notification.message, "")],
    )


Renderer = Callable[[Notification, Any, str], EmailContent]

_TEMPLATES: dict[str, tuple[type[NotificationData], Renderer]] = {
    NOTIFICATION_TYPE_BOOKING_PENDING: (BookingPendingData, _booking_pending),
    NOTIFICATION_TYPE_BOOKING_APPROVED: (BookingApprovedData, _booking_approved),
    NOTIFICATION_TYPE_BOOKING_REJECTED: (BookingRejectedData, _booking_rejected),
    NOTIFICATION_TYPE_PAYMENT_RECEIVED: (PaymentReceivedData, _payment_received),
    NOTIFICATION_TYPE_PAYMENT_REFUNDED: (PaymentRefundedData, _payment_refunded),
    NOTIFICATION_TYPE_CLASS_REMINDER: (ClassReminderData, _class_reminder),
    NOTIFICATION_TYPE_MESSAGE: (GenericData, _message),
}


def render_email(notification: Notification, *, base_url: str = "") -> EmailContent:
    """Render the email subject and HTML body for ``notification``."""

    variant, renderer = _TEMPLATES.get(notification.type, (GenericData, _generic))
    return renderer(notification, variant.from_data(notification.data), base_url)


__all__ = [
    "BookingApprovedData",
    "BookingPendingData",
    "BookingRejectedData",
    "ClassReminderData",
    "DEFAULT_REFUND_REASON",
    "EmailContent",
    "GenericData",
    "NotificationData",
    "PaymentReceivedData",
    "PaymentRefundedData",
    "PLACEHOLDER",
    "render_email",
]
