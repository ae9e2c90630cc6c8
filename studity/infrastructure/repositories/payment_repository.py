"""Read access to booking payments."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studity.domain.entities import Payment
from studity.infrastructure.models import PaymentModel


class PaymentRepository:
    """Look up payments linked to bookings."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, payment_id: int) -> Payment | None:
        model = self.session.get(PaymentModel, payment_id)
        return self._to_entity(model) if model else None

    def get_by_booking(self, booking_id: int) -> Payment | None:
        model = (
            self.session.query(PaymentModel)
            .filter(PaymentModel.booking_id == booking_id)
            .order_by(PaymentModel.id.desc())
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, payment: Payment) -> Payment:
        model = PaymentModel(
            user_id=payment.user_id,
            teacher_id=payment.teacher_id,
            booking_id=payment.booking_id,
            amount=payment.amount,
            status=payment.status,
            platform_fee=payment.platform_fee,
            teacher_earning=payment.teacher_earning,
            refund_amount=payment.refund_amount,
            subject=payment.subject,
        )
        self.session.add(model)
        self._commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _to_entity(model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            user_id=model.user_id,
            teacher_id=model.teacher_id,
            booking_id=model.booking_id,
            amount=model.amount,
            status=model.status,
            platform_fee=model.platform_fee,
            teacher_earning=model.teacher_earning,
            refund_amount=model.refund_amount,
            subject=model.subject,
        )


__all__ = ["PaymentRepository"]
