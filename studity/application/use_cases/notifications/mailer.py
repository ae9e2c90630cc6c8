"""Deliver notification emails without blocking the caller."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Callable

from sqlalchemy.orm import Session

from studity.config import get_settings
from studity.domain.entities import Notification
from studity.infrastructure.email import send_email
from studity.infrastructure.repositories import NotificationRepository, UserRepository

from .templates import render_email

logger = logging.getLogger(__name__)

EmailSender = Callable[[str, str, str], bool]


class NotificationMailer:
    """Render and send the email copy of a notification.

    With an ``executor`` the delivery runs in the background and the caller
    gets a :class:`~concurrent.futures.Future`; without one it runs inline.
    Failures are logged and leave ``email_sent`` untouched. They never
    propagate to the code that created the notification.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        sender: EmailSender | None = None,
        executor: Executor | None = None,
        base_url: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._sender = sender
        self._executor = executor
        self._base_url = base_url

    def schedule(self, notification: Notification) -> Future | None:
        if self._executor is None:
            self.deliver(notification)
            return None
        return self._executor.submit(self.deliver, notification)

    def deliver(self, notification: Notification) -> bool:
        """Send the email for ``notification`` and flag it as sent on success."""

        session = self._session_factory()
        try:
            recipient = UserRepository(session).get(notification.recipient_id)
            if recipient is None or not recipient.email:
                logger.warning(
                    "Recipient %s not found or without email for notification %s",
                    notification.recipient_id,
                    notification.id,
                )
                return False

            content = render_email(notification, base_url=self._resolve_base_url())
            sender = self._sender or send_email
            if not sender(content.subject, content.html, recipient.email):
                logger.warning(
                    "Email for notification %s to %s was not delivered",
                    notification.id,
                    recipient.email,
                )
                return False

            NotificationRepository(session).mark_email_sent(notification.id)
            logger.info(
                "Email notification %s sent to %s", notification.id, recipient.email
            )
            return True
        except Exception:
            logger.exception("Error sending email for notification %s", notification.id)
            return False
        finally:
            session.close()

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def _resolve_base_url(self) -> str:
        if self._base_url is not None:
            return self._base_url
        return get_settings().client_url


@lru_cache
def get_notification_mailer() -> NotificationMailer:
    """Return the process-wide mailer backed by a small thread pool."""

    from studity.infrastructure.database import SessionLocal

    settings = get_settings()
    executor = ThreadPoolExecutor(
        max_workers=settings.email_workers,
        thread_name_prefix="notification-email",
    )
    return NotificationMailer(SessionLocal, executor=executor)


def shutdown_notification_mailer() -> None:
    if get_notification_mailer.cache_info().currsize:
        get_notification_mailer().shutdown(wait=False)
        get_notification_mailer.cache_clear()


__all__ = [
    "EmailSender",
    "NotificationMailer",
    "get_notification_mailer",
    "shutdown_notification_mailer",
]
