"""Repository implementations for infrastructure layer."""

from .booking_repository import BookingRepository
from .notification_repository import NotificationRepository
from .payment_repository import PaymentRepository
from .reminder_log_repository import ReminderLogRepository
from .user_repository import UserRepository

__all__ = [
    "BookingRepository",
    "NotificationRepository",
    "PaymentRepository",
    "ReminderLogRepository",
    "UserRepository",
]
