"""Domain entities exposed by the application."""

from .booking import (
    BOOKING_STATUS_CANCELLED,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_RESCHEDULED,
    Booking,
)
from .notification import (
    MESSAGE_MAX_LENGTH,
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPE_BOOKING_APPROVED,
    NOTIFICATION_TYPE_BOOKING_PENDING,
    NOTIFICATION_TYPE_BOOKING_REJECTED,
    NOTIFICATION_TYPE_CLASS_REMINDER,
    NOTIFICATION_TYPE_GENERAL,
    NOTIFICATION_TYPE_MESSAGE,
    NOTIFICATION_TYPE_PAYMENT_RECEIVED,
    NOTIFICATION_TYPE_PAYMENT_REFUNDED,
    NOTIFICATION_TYPES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_URGENT,
    TITLE_MAX_LENGTH,
    Notification,
)
from .payment import (
    PAYMENT_STATUS_COMPLETED,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PARTIALLY_REFUNDED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_PROCESSING,
    PAYMENT_STATUS_REFUNDED,
    Payment,
)
from .user import ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER, User

__all__ = [
    "Booking",
    "BOOKING_STATUS_PENDING",
    "BOOKING_STATUS_CONFIRMED",
    "BOOKING_STATUS_COMPLETED",
    "BOOKING_STATUS_CANCELLED",
    "BOOKING_STATUS_RESCHEDULED",
    "Notification",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPE_BOOKING_PENDING",
    "NOTIFICATION_TYPE_BOOKING_APPROVED",
    "NOTIFICATION_TYPE_BOOKING_REJECTED",
    "NOTIFICATION_TYPE_PAYMENT_RECEIVED",
    "NOTIFICATION_TYPE_PAYMENT_REFUNDED",
    "NOTIFICATION_TYPE_CLASS_REMINDER",
    "NOTIFICATION_TYPE_MESSAGE",
    "NOTIFICATION_TYPE_GENERAL",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "TITLE_MAX_LENGTH",
    "MESSAGE_MAX_LENGTH",
    "Payment",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_PROCESSING",
    "PAYMENT_STATUS_COMPLETED",
    "PAYMENT_STATUS_FAILED",
    "PAYMENT_STATUS_REFUNDED",
    "PAYMENT_STATUS_PARTIALLY_REFUNDED",
    "User",
    "ROLE_STUDENT",
    "ROLE_TEACHER",
    "ROLE_ADMIN",
]
