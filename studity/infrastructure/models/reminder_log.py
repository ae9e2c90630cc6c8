"""SQLAlchemy model recording which class reminders were already sent."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from studity.infrastructure.database import Base
from studity.utils import now_in_app_naive_datetime


class ReminderLogModel(Base):
    """One row per booking and reminder lead time that has been sent."""

    __tablename__ = "reminder_log"
    __table_args__ = (
        UniqueConstraint("booking_id", "reminder_type", name="uq_reminder_log_booking_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("booking.id"), nullable=False, index=True)
    reminder_type = Column(String(8), nullable=False)
    sent_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["ReminderLogModel"]
