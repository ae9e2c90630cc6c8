"""Notifications emitted by booking, payment and reminder events.

Every wrapper logs its own failure instead of raising, so a broken
notification never aborts the booking or payment flow that triggered it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from studity.domain.entities import (
    NOTIFICATION_TYPE_BOOKING_APPROVED,
    NOTIFICATION_TYPE_BOOKING_PENDING,
    NOTIFICATION_TYPE_BOOKING_REJECTED,
    NOTIFICATION_TYPE_CLASS_REMINDER,
    NOTIFICATION_TYPE_PAYMENT_RECEIVED,
    NOTIFICATION_TYPE_PAYMENT_REFUNDED,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    Booking,
    Notification,
    Payment,
)
from studity.infrastructure.repositories import PaymentRepository

from .templates import (
    DEFAULT_REFUND_REASON,
    BookingApprovedData,
    BookingPendingData,
    BookingRejectedData,
    ClassReminderData,
    PaymentReceivedData,
    PaymentRefundedData,
)

if TYPE_CHECKING:
    from .service import NotificationService

logger = logging.getLogger(__name__)

REMINDER_DAY_AHEAD = "24h"
REMINDER_ONE_HOUR = "1h"
REMINDER_TYPES = (REMINDER_DAY_AHEAD, REMINDER_ONE_HOUR)

_REMINDER_LEAD_TEXT = {
    REMINDER_DAY_AHEAD: "24 hours",
    REMINDER_ONE_HOUR: "1 hour",
}


def _amount(value) -> str:
    if value is None:
        return "0"
    number = float(value)
    return str(int(number)) if number.is_integer() else f"{number:.2f}"


def notify_booking_pending(
    service: NotificationService, booking: Booking
) -> Notification | None:
    """Ask the teacher to review a new booking request."""

    try:
        return service.create_notification(
            recipient_id=booking.teacher_id,
            sender_id=booking.student_id,
            title="New Class Booking Request",
            message=(
                f"{booking.student_name} has requested a class booking for "
                f"{booking.subject}. Please review and approve."
            ),
            type=NOTIFICATION_TYPE_BOOKING_PENDING,
            category="booking",
            priority=PRIORITY_HIGH,
            action_required=True,
            action_url=f"/teacher/bookings/{booking.id}",
            data=BookingPendingData(
                booking_id=booking.id,
                student_id=booking.student_id,
                student_name=booking.student_name,
                subject=booking.subject,
                class_date=booking.date,
                class_time=booking.time,
                amount=booking.amount,
            ).to_data(),
            send_email=True,
        )
    except Exception:
        logger.exception("Error sending booking pending notification for %s", booking.id)
        return None


def notify_booking_approved(
    service: NotificationService,
    booking: Booking,
    *,
    teacher_name: str | None = None,
    meeting_link: str | None = None,
) -> Notification | None:
    """Tell the student the booking was approved.

    When a completed payment exists for the booking, the teacher is notified
    of the payment as well.
    """

    teacher_name = teacher_name or booking.teacher_name
    meeting_link = meeting_link or booking.meeting_link
    notification = None
    try:
        notification = service.create_notification(
            recipient_id=booking.student_id,
            sender_id=booking.teacher_id,
            title="Class Booking Approved! 🎉",
            message=(
                f"Great news! {teacher_name} has approved your class booking for "
                f"{booking.subject}. Get ready to learn!"
            ),
            type=NOTIFICATION_TYPE_BOOKING_APPROVED,
            category="booking",
            priority=PRIORITY_HIGH,
            action_url=f"/student/bookings/{booking.id}",
            data=BookingApprovedData(
                booking_id=booking.id,
                teacher_id=booking.teacher_id,
                teacher_name=teacher_name,
                subject=booking.subject,
                class_date=booking.date,
                class_time=booking.time,
                meeting_link=meeting_link,
            ).to_data(),
            send_email=True,
        )
    except Exception:
        logger.exception("Error sending booking approved notification for %s", booking.id)

    try:
        payment = PaymentRepository(service.session).get_by_booking(booking.id)
    except Exception:
        logger.exception("Error loading payment for booking %s", booking.id)
        payment = None
    if payment is not None and payment.is_completed():
        notify_payment_received(
            service, payment, student_name=booking.student_name, booking=booking
        )
    return notification


def notify_booking_rejected(
    service: NotificationService,
    booking: Booking,
    *,
    teacher_name: str | None = None,
    refund_amount: float | None = None,
) -> Notification | None:
    teacher_name = teacher_name or booking.teacher_name
    try:
        return service.create_notification(
            recipient_id=booking.student_id,
            sender_id=booking.teacher_id,
            title="Booking Not Approved - Refund Initiated",
            message=(
                f"Unfortunately, {teacher_name} couldn't approve your class booking "
                f"for {booking.subject}. Your payment has been refunded."
            ),
            type=NOTIFICATION_TYPE_BOOKING_REJECTED,
            category="booking",
            priority=PRIORITY_MEDIUM,
            action_url="/student/teachers",
            data=BookingRejectedData(
                booking_id=booking.id,
                teacher_id=booking.teacher_id,
                teacher_name=teacher_name,
                subject=booking.subject,
                class_date=booking.date,
                class_time=booking.time,
                amount=booking.amount,
                refund_amount=refund_amount or booking.amount,
            ).to_data(),
            send_email=True,
        )
    except Exception:
        logger.exception("Error sending booking rejected notification for %s", booking.id)
        return None


def notify_payment_received(
    service: NotificationService,
    payment: Payment,
    *,
    student_name: str,
    booking: Booking | None = None,
) -> Notification | None:
    """Tell the teacher about a completed payment and their earning."""

    try:
        return service.create_notification(
            recipient_id=payment.teacher_id,
            title="Payment Received! 💰",
            message=(
                f"You've received a payment of ₹{_amount(payment.teacher_earning)} "
                f"from {student_name}. Keep up the great teaching!"
            ),
            type=NOTIFICATION_TYPE_PAYMENT_RECEIVED,
            category="payment",
            priority=PRIORITY_MEDIUM,
            action_url="/teacher/earnings",
            data=PaymentReceivedData(
                payment_id=payment.id,
                booking_id=payment.booking_id,
                student_name=student_name,
                subject=payment.subject or (booking.subject if booking else None),
                class_date=booking.date if booking else None,
                amount=payment.amount,
                platform_fee=payment.platform_fee,
                teacher_earning=payment.teacher_earning,
            ).to_data(),
            send_email=True,
        )
    except Exception:
        logger.exception("Error sending payment received notification for %s", payment.id)
        return None


def notify_refund_processed(
    service: NotificationService,
    payment: Payment,
    *,
    refund_reason: str | None = None,
) -> Notification | None:
    refund_amount = payment.refund_amount or payment.amount
    try:
        return service.create_notification(
            recipient_id=payment.user_id,
            title="Refund Processed Successfully",
            message=(
                f"Your refund of ₹{_amount(refund_amount)} has been processed and will "
                "be credited to your account within 3-5 business days."
            ),
            type=NOTIFICATION_TYPE_PAYMENT_REFUNDED,
            category="payment",
            priority=PRIORITY_MEDIUM,
            action_url=f"/student/payments/{payment.id}",
            data=PaymentRefundedData(
                payment_id=payment.id,
                booking_id=payment.booking_id,
                refund_amount=refund_amount,
                refund_reason=refund_reason or DEFAULT_REFUND_REASON,
            ).to_data(),
            send_email=True,
        )
    except Exception:
        logger.exception("Error sending refund notification for %s", payment.id)
        return None


def send_class_reminder(
    service: NotificationService,
    booking: Booking,
    reminder_type: str = REMINDER_ONE_HOUR,
) -> list[Notification]:
    """Remind both participants of an upcoming class.

    Only the day-ahead reminder is emailed. The student and the teacher are
    notified independently.
    """

    if reminder_type not in _REMINDER_LEAD_TEXT:
        raise ValueError(f"Unknown reminder type '{reminder_type}'")

    lead = _REMINDER_LEAD_TEXT[reminder_type]
    data = ClassReminderData(
        booking_id=booking.id,
        subject=booking.subject,
        class_date=booking.date,
        class_time=booking.time,
        meeting_link=booking.meeting_link,
        reminder_type=reminder_type,
    ).to_data()
    recipients = (
        (
            booking.student_id,
            f"Your {booking.subject} class with {booking.teacher_name} starts in "
            f"{lead}. Don't forget!",
        ),
        (
            booking.teacher_id,
            f"Your {booking.subject} class with {booking.student_name} starts in "
            f"{lead}. Get ready!",
        ),
    )

    sent: list[Notification] = []
    for recipient_id, message in recipients:
        try:
            sent.append(
                service.create_notification(
                    recipient_id=recipient_id,
                    title=f"Class Reminder - {lead} to go!",
                    message=message,
                    type=NOTIFICATION_TYPE_CLASS_REMINDER,
                    category="reminder",
                    priority=(
                        PRIORITY_HIGH
                        if reminder_type == REMINDER_ONE_HOUR
                        else PRIORITY_MEDIUM
                    ),
                    action_url=f"/bookings/{booking.id}",
                    data=dict(data),
                    send_email=reminder_type == REMINDER_DAY_AHEAD,
                )
            )
        except Exception:
            logger.exception(
                "Error sending %s class reminder for booking %s to user %s",
                reminder_type,
                booking.id,
                recipient_id,
            )
    return sent


__all__ = [
    "REMINDER_DAY_AHEAD",
    "REMINDER_ONE_HOUR",
    "REMINDER_TYPES",
    "notify_booking_approved",
    "notify_booking_pending",
    "notify_booking_rejected",
    "notify_payment_received",
    "notify_refund_processed",
    "send_class_reminder",
]
