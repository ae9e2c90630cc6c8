"""Domain entity representing a class booking."""

from dataclasses import dataclass
from datetime import date

BOOKING_STATUS_PENDING = "pending"
BOOKING_STATUS_CONFIRMED = "confirmed"
BOOKING_STATUS_COMPLETED = "completed"
BOOKING_STATUS_CANCELLED = "cancelled"
BOOKING_STATUS_RESCHEDULED = "rescheduled"


@dataclass
class Booking:
    """A class a student booked with a teacher."""

    id: int | None
    student_id: int
    student_name: str
    teacher_id: int
    teacher_name: str
    subject: str
    date: date
    time: str
    duration: float
    status: str
    amount: float
    meeting_link: str | None = None

    def is_confirmed(self) -> bool:
        return self.status == BOOKING_STATUS_CONFIRMED


__all__ = [
    "Booking",
    "BOOKING_STATUS_PENDING",
    "BOOKING_STATUS_CONFIRMED",
    "BOOKING_STATUS_COMPLETED",
    "BOOKING_STATUS_CANCELLED",
    "BOOKING_STATUS_RESCHEDULED",
]
