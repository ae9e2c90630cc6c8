"""SQLAlchemy model for booking payments."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String

from studity.infrastructure.database import Base


class PaymentModel(Base):
    """Database representation of a payment."""

    __tablename__ = "payment"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("booking.id"), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    platform_fee = Column(Float, nullable=False, default=0)
    teacher_earning = Column(Float, nullable=False, default=0)
    refund_amount = Column(Float, nullable=True)
    subject = Column(String(60), nullable=True)


__all__ = ["PaymentModel"]
