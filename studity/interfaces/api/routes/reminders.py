"""Routes to trigger and inspect class reminders."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from studity.application.use_cases.notifications import (
    BookingNotFoundError,
    ReminderError,
    ReminderService,
)
from studity.domain.entities import User
from studity.infrastructure.database import get_db
from studity.infrastructure.repositories import BookingRepository
from studity.interfaces.api.dependencies import (
    get_current_active_user,
    get_reminder_service,
    require_admin,
)
from studity.interfaces.api.schemas import (
    ManualReminderRead,
    ManualReminderRequest,
    NotificationRead,
    ReminderStatsRead,
)

router = APIRouter(prefix="/reminders", tags=["reminders"])
logger = logging.getLogger(__name__)


@router.post(
    "/bookings/{booking_id}",
    response_model=ManualReminderRead,
    status_code=status.HTTP_202_ACCEPTED,
)
def send_manual_reminder(
    booking_id: int,
    payload: ManualReminderRequest | None = None,
    db: Session = Depends(get_db),
    reminders: ReminderService = Depends(get_reminder_service),
    current_user: User = Depends(get_current_active_user),
):
    """Send a reminder for a booking right away.

    Only the booking's student, its teacher or an administrator may do so.
    """

    reminder_type = payload.reminder_type if payload else ManualReminderRequest().reminder_type
    booking = BookingRepository(db).get(booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    if not current_user.is_admin() and current_user.id not in (
        booking.student_id,
        booking.teacher_id,
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    try:
        notifications = reminders.send_manual_reminder(booking_id, reminder_type)
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReminderError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(
        "User %s triggered a %s reminder for booking %s",
        current_user.id,
        reminder_type,
        booking_id,
    )
    return ManualReminderRead(
        booking_id=booking_id,
        reminder_type=reminder_type,
        notifications=[NotificationRead.model_validate(n) for n in notifications],
    )


@router.get("/stats", response_model=ReminderStatsRead)
def read_reminder_stats(
    reminders: ReminderService = Depends(get_reminder_service),
    current_user: User = Depends(require_admin),
):
    return ReminderStatsRead.model_validate(reminders.get_reminder_stats())
