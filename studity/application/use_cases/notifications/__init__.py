"""Notification use cases: creation, delivery, domain events and reminders."""

from .events import (
    REMINDER_DAY_AHEAD,
    REMINDER_ONE_HOUR,
    REMINDER_TYPES,
    notify_booking_approved,
    notify_booking_pending,
    notify_booking_rejected,
    notify_payment_received,
    notify_refund_processed,
    send_class_reminder,
)
from .mailer import (
    NotificationMailer,
    get_notification_mailer,
    shutdown_notification_mailer,
)
from .reminders import (
    BookingNotConfirmedError,
    BookingNotFoundError,
    ReminderError,
    ReminderService,
    ReminderStats,
)
from .service import (
    NotificationPage,
    NotificationService,
    NotificationStats,
    NotificationValidationError,
)
from .templates import EmailContent, render_email

__all__ = [
    "BookingNotConfirmedError",
    "BookingNotFoundError",
    "EmailContent",
    "NotificationMailer",
    "NotificationPage",
    "NotificationService",
    "NotificationStats",
    "NotificationValidationError",
    "REMINDER_DAY_AHEAD",
    "REMINDER_ONE_HOUR",
    "REMINDER_TYPES",
    "ReminderError",
    "ReminderService",
    "ReminderStats",
    "get_notification_mailer",
    "notify_booking_approved",
    "notify_booking_pending",
    "notify_booking_rejected",
    "notify_payment_received",
    "notify_refund_processed",
    "render_email",
    "send_class_reminder",
    "shutdown_notification_mailer",
]
