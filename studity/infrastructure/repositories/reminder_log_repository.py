"""Persistence of the per-booking reminder markers."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from studity.infrastructure.models import ReminderLogModel
from studity.utils import now_in_app_naive_datetime


class ReminderLogRepository:
    """Record which reminders were sent so scheduled ticks do not repeat them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def claim(self, booking_id: int, reminder_type: str) -> bool:
        """Insert the marker for ``booking_id``/``reminder_type``.

        Returns ``False`` when another tick already claimed it.
        """

        model = ReminderLogModel(
            booking_id=booking_id,
            reminder_type=reminder_type,
            sent_at=now_in_app_naive_datetime(),
        )
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return True

    def record(self, booking_id: int, reminder_type: str) -> None:
        """Store the marker, ignoring an existing one."""

        self.claim(booking_id, reminder_type)

    def release(self, booking_id: int, reminder_type: str) -> bool:
        """Drop the marker so a later tick may send the reminder again."""

        deleted = (
            self.session.query(ReminderLogModel)
            .filter(
                ReminderLogModel.booking_id == booking_id,
                ReminderLogModel.reminder_type == reminder_type,
            )
            .delete(synchronize_session=False)
        )
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return bool(deleted)

    def exists(self, booking_id: int, reminder_type: str) -> bool:
        return (
            self.session.query(ReminderLogModel.id)
            .filter(
                ReminderLogModel.booking_id == booking_id,
                ReminderLogModel.reminder_type == reminder_type,
            )
            .first()
            is not None
        )


__all__ = ["ReminderLogRepository"]
