"""Read access to class bookings."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studity.domain.entities import BOOKING_STATUS_CONFIRMED, Booking
from studity.infrastructure.models import BookingModel


class BookingRepository:
    """Query bookings on behalf of the notification pipeline."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, booking_id: int) -> Booking | None:
        model = self.session.get(BookingModel, booking_id)
        return self._to_entity(model) if model else None

    def list_confirmed_between(self, start: date, end: date) -> Sequence[Booking]:
        """Return confirmed bookings dated in ``[start, end)``."""

        query = (
            self.session.query(BookingModel)
            .filter(BookingModel.status == BOOKING_STATUS_CONFIRMED)
            .filter(BookingModel.date >= start, BookingModel.date < end)
            .order_by(BookingModel.date.asc(), BookingModel.time.asc(), BookingModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def count_confirmed_between(self, start: date, end: date) -> int:
        return (
            self.session.query(BookingModel)
            .filter(BookingModel.status == BOOKING_STATUS_CONFIRMED)
            .filter(BookingModel.date >= start, BookingModel.date < end)
            .count()
        )

    def create(self, booking: Booking) -> Booking:
        model = BookingModel(
            student_id=booking.student_id,
            student_name=booking.student_name,
            teacher_id=booking.teacher_id,
            teacher_name=booking.teacher_name,
            subject=booking.subject,
            date=booking.date,
            time=booking.time,
            duration=booking.duration,
            status=booking.status,
            amount=booking.amount,
            meeting_link=booking.meeting_link,
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
    def _to_entity(model: BookingModel) -> Booking:
        return Booking(
            id=model.id,
            student_id=model.student_id,
            student_name=model.student_name,
            teacher_id=model.teacher_id,
            teacher_name=model.teacher_name,
            subject=model.subject,
            date=model.date,
            time=model.time,
            duration=model.duration,
            status=model.status,
            amount=model.amount,
            meeting_link=model.meeting_link,
        )


__all__ = ["BookingRepository"]
