"""SQLAlchemy model for class bookings."""

from sqlalchemy import Column, Date, Float, ForeignKey, Index, Integer, String

from studity.infrastructure.database import Base


class BookingModel(Base):
    """Database representation of a booked class."""

    __tablename__ = "booking"
    __table_args__ = (Index("ix_booking_status_date", "status", "date"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    student_name = Column(String(120), nullable=False)
    teacher_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    teacher_name = Column(String(120), nullable=False)
    subject = Column(String(60), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)
    duration = Column(Float, nullable=False, default=1)
    status = Column(String(20), nullable=False, default="pending")
    amount = Column(Float, nullable=False, default=0)
    meeting_link = Column(String(255), nullable=True)


__all__ = ["BookingModel"]
