"""Domain entity representing a payment made for a booking."""

from dataclasses import dataclass

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PROCESSING = "processing"
PAYMENT_STATUS_COMPLETED = "completed"
PAYMENT_STATUS_FAILED = "failed"
PAYMENT_STATUS_REFUNDED = "refunded"
PAYMENT_STATUS_PARTIALLY_REFUNDED = "partially_refunded"


@dataclass
class Payment:
    """Money paid by a student, split between the platform and the teacher."""

    id: int | None
    user_id: int
    teacher_id: int
    booking_id: int | None
    amount: float
    status: str
    platform_fee: float = 0
    teacher_earning: float = 0
    refund_amount: float | None = None
    subject: str | None = None

    def is_completed(self) -> bool:
        return self.status == PAYMENT_STATUS_COMPLETED


__all__ = [
    "Payment",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_PROCESSING",
    "PAYMENT_STATUS_COMPLETED",
    "PAYMENT_STATUS_FAILED",
    "PAYMENT_STATUS_REFUNDED",
    "PAYMENT_STATUS_PARTIALLY_REFUNDED",
]
