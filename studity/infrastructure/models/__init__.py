"""ORM models used by the application infrastructure."""

from .user import UserModel
from .booking import BookingModel
from .payment import PaymentModel
from .notification import NotificationModel
from .reminder_log import ReminderLogModel

__all__ = [
    "UserModel",
    "BookingModel",
    "PaymentModel",
    "NotificationModel",
    "ReminderLogModel",
]
