"""Time-driven class reminders and weekly notification cleanup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from functools import partial
from typing import Callable

from anyio import to_thread
from sqlalchemy.orm import Session

from studity.config import get_settings
from studity.domain.entities import Booking, Notification
from studity.infrastructure.repositories import BookingRepository, ReminderLogRepository
from studity.infrastructure.scheduler import (
    DailyCadence,
    HourlyCadence,
    IntervalCadence,
    Scheduler,
    WeeklyCadence,
    get_scheduler,
)
from studity.utils import combine_in_app_timezone, now_in_app_timezone

from .events import REMINDER_DAY_AHEAD, REMINDER_ONE_HOUR, REMINDER_TYPES, send_class_reminder
from .service import NotificationService

logger = logging.getLogger(__name__)

SUNDAY = 6

UPCOMING_CHECK_WINDOW = (timedelta(hours=0.8), timedelta(hours=1.2))
ONE_HOUR_WINDOW = (timedelta(minutes=45), timedelta(minutes=75))


class ReminderError(ValueError):
    """Raised when a manual reminder cannot be sent."""


class BookingNotFoundError(ReminderError):
    pass


class BookingNotConfirmedError(ReminderError):
    pass


@dataclass
class ReminderStats:
    upcoming_today: int
    upcoming_tomorrow: int
    upcoming_this_week: int
    last_checked: datetime


def _until(start: datetime, end: datetime) -> timedelta:
    return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)


class ReminderService:
    """Emit 24-hour and 1-hour class reminders on a wall-clock schedule.

    Each tick opens its own session, so overlapping ticks never share state.
    With ``dedupe`` enabled a ``(booking, reminder type)`` marker is claimed
    before a scheduled reminder goes out and already claimed reminders are
    skipped.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        service_factory: Callable[[Session], NotificationService] | None = None,
        scheduler: Scheduler | None = None,
        dedupe: bool | None = None,
        retention_days: int | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        settings = get_settings()
        self._session_factory = session_factory
        self._service_factory = service_factory or NotificationService
        self._scheduler = scheduler
        self.dedupe = settings.reminder_dedupe_enabled if dedupe is None else dedupe
        self.retention_days = (
            settings.notification_retention_days
            if retention_days is None
            else retention_days
        )
        self._clock = clock
        self.initialized = False

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = get_scheduler()
        return self._scheduler

    def init(self) -> None:
        """Register the reminder jobs on the scheduler once."""

        if self.initialized:
            return

        logger.info("Initializing reminder service")
        scheduler = self.scheduler
        scheduler.schedule(
            self.check_upcoming_classes, IntervalCadence(15), "check_upcoming_classes"
        )
        scheduler.schedule(
            self.send_day_ahead_reminders, DailyCadence(9), "send_day_ahead_reminders"
        )
        scheduler.schedule(
            self.send_one_hour_reminders, HourlyCadence(0), "send_one_hour_reminders"
        )
        scheduler.schedule(
            self.cleanup_notifications, WeeklyCadence(SUNDAY, 2), "cleanup_notifications"
        )
        self.initialized = True
        logger.info("Reminder service initialized")

    async def shutdown(self) -> None:
        """Stop the scheduler so :meth:`init` can register the jobs again."""

        await self.scheduler.stop()
        self.initialized = False
        logger.info("Reminder service stopped")

    async def check_upcoming_classes(self, now: datetime | None = None) -> int:
        return await to_thread.run_sync(partial(self.run_upcoming_check, now))

    async def send_one_hour_reminders(self, now: datetime | None = None) -> int:
        return await to_thread.run_sync(partial(self.run_one_hour_reminders, now))

    async def send_day_ahead_reminders(self, now: datetime | None = None) -> int:
        return await to_thread.run_sync(partial(self.run_day_ahead_reminders, now))

    async def cleanup_notifications(self, now: datetime | None = None) -> int:
        return await to_thread.run_sync(partial(self.run_cleanup, now))

    def run_upcoming_check(self, now: datetime | None = None) -> int:
        """Send ``1h`` reminders for classes 0.8 to 1.2 hours away."""

        try:
            return self._remind_within(UPCOMING_CHECK_WINDOW, now)
        except Exception:
            logger.exception("Error checking upcoming classes")
            return 0

    def run_one_hour_reminders(self, now: datetime | None = None) -> int:
        """Send ``1h`` reminders for classes 45 to 75 minutes away."""

        try:
            sent = self._remind_within(ONE_HOUR_WINDOW, now)
        except Exception:
            logger.exception("Error sending 1-hour reminders")
            return 0
        if sent:
            logger.info("Sent 1-hour reminders for %s classes", sent)
        return sent

    def run_day_ahead_reminders(self, now: datetime | None = None) -> int:
        """Send ``24h`` reminders for every confirmed class dated tomorrow."""

        tomorrow = (now or self._clock()).date() + timedelta(days=1)
        session = self._session_factory()
        try:
            bookings = BookingRepository(session).list_confirmed_between(
                tomorrow, tomorrow + timedelta(days=1)
            )
            service = self._service_factory(session)
            sent = sum(
                1
                for booking in bookings
                if self._remind(session, service, booking, REMINDER_DAY_AHEAD)
            )
        except Exception:
            logger.exception("Error sending 24-hour reminders")
            return 0
        finally:
            session.close()

        logger.info("Sent 24-hour reminders for %s classes", sent)
        return sent

    def run_cleanup(self, now: datetime | None = None) -> int:
        session = self._session_factory()
        try:
            return self._service_factory(session).cleanup_old_notifications(
                self.retention_days, now=now
            )
        except Exception:
            logger.exception("Error cleaning up old notifications")
            return 0
        finally:
            session.close()

    def send_manual_reminder(
        self, booking_id: int, reminder_type: str = REMINDER_ONE_HOUR
    ) -> list[Notification]:
        """Send a reminder for one booking right away.

        The dedupe marker is recorded but never checked, so a manual reminder
        always goes out.
        """

        if reminder_type not in REMINDER_TYPES:
            raise ReminderError(f"Unknown reminder type '{reminder_type}'")

        session = self._session_factory()
        try:
            booking = BookingRepository(session).get(booking_id)
            if booking is None:
                raise BookingNotFoundError("Booking not found")
            if not booking.is_confirmed():
                raise BookingNotConfirmedError(
                    "Can only send reminders for confirmed bookings"
                )

            sent = send_class_reminder(
                self._service_factory(session), booking, reminder_type
            )
            ReminderLogRepository(session).record(booking.id, reminder_type)
        finally:
            session.close()

        logger.info("Manual %s reminder sent for booking %s", reminder_type, booking_id)
        return sent

    def get_reminder_stats(self, now: datetime | None = None) -> ReminderStats:
        now = now or self._clock()
        today = now.date()
        session = self._session_factory()
        try:
            bookings = BookingRepository(session)
            return ReminderStats(
                upcoming_today=bookings.count_confirmed_between(
                    today, today + timedelta(days=1)
                ),
                upcoming_tomorrow=bookings.count_confirmed_between(
                    today + timedelta(days=1), today + timedelta(days=2)
                ),
                upcoming_this_week=bookings.count_confirmed_between(
                    today, today + timedelta(days=7)
                ),
                last_checked=now,
            )
        finally:
            session.close()

    def _remind_within(
        self, window: tuple[timedelta, timedelta], now: datetime | None
    ) -> int:
        now = now or self._clock()
        lower, upper = window
        session = self._session_factory()
        try:
            bookings = BookingRepository(session).list_confirmed_between(
                now.date(), _day_after(now + timedelta(hours=24))
            )
            service = self._service_factory(session)
            sent = 0
            for booking in bookings:
                try:
                    until_class = _until(
                        now, combine_in_app_timezone(booking.date, booking.time)
                    )
                except ValueError:
                    logger.warning(
                        "Booking %s has an invalid class time %r", booking.id, booking.time
                    )
                    continue
                if lower < until_class <= upper and self._remind(
                    session, service, booking, REMINDER_ONE_HOUR
                ):
                    sent += 1
            return sent
        finally:
            session.close()

    def _remind(
        self,
        session: Session,
        service: NotificationService,
        booking: Booking,
        reminder_type: str,
    ) -> bool:
        log = ReminderLogRepository(session)
        claimed = False
        try:
            if self.dedupe:
                if not log.claim(booking.id, reminder_type):
                    logger.debug(
                        "Skipping %s reminder for booking %s: already sent",
                        reminder_type,
                        booking.id,
                    )
                    return False
                claimed = True
            if send_class_reminder(service, booking, reminder_type):
                return True
            logger.warning(
                "No %s reminder delivered for booking %s", reminder_type, booking.id
            )
        except Exception:
            logger.exception(
                "Error sending %s reminder for booking %s", reminder_type, booking.id
            )

        if claimed:
            # Nothing went out, so a later tick gets another chance.
            try:
                log.release(booking.id, reminder_type)
            except Exception:
                logger.exception(
                    "Error releasing %s reminder marker for booking %s",
                    reminder_type,
                    booking.id,
                )
        return False


def _day_after(moment: datetime) -> date:
    return moment.date() + timedelta(days=1)


__all__ = [
    "BookingNotConfirmedError",
    "BookingNotFoundError",
    "ReminderError",
    "ReminderService",
    "ReminderStats",
]
