"""Creation, delivery and lifecycle management of user notifications."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Protocol

from sqlalchemy.orm import Session

from studity.domain.entities import (
    MESSAGE_MAX_LENGTH,
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPES,
    PRIORITY_MEDIUM,
    TITLE_MAX_LENGTH,
    Notification,
)
from studity.infrastructure.notifications import notification_publisher
from studity.infrastructure.repositories import NotificationRepository
from studity.utils import now_in_app_timezone

from .mailer import NotificationMailer, get_notification_mailer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
DEFAULT_RETENTION_DAYS = 30


class NotificationValidationError(ValueError):
    """Raised when a notification cannot be created from the given input."""


class LivePublisher(Protocol):
    def is_connected(self, user_id: int) -> bool: ...

    def dispatch(self, notification: Notification) -> None: ...


@dataclass
class NotificationPage:
    """One page of a recipient's notifications."""

    notifications: list[Notification]
    total: int
    unread_count: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class CategoryStats:
    total: int = 0
    unread: int = 0


@dataclass
class NotificationStats:
    total: int = 0
    unread: int = 0
    categories: dict[str, CategoryStats] = field(default_factory=dict)


class NotificationService:
    """Single entry point to create notifications and manage their lifecycle.

    A created notification is always persisted first. The live push and the
    email copy are best-effort side channels whose failures are logged and
    never surface to the caller.
    """

    def __init__(
        self,
        session: Session,
        *,
        publisher: LivePublisher | None = None,
        mailer: NotificationMailer | None = None,
    ) -> None:
        self.session = session
        self.repository = NotificationRepository(session)
        self._publisher = publisher if publisher is not None else notification_publisher
        self._mailer = mailer

    @property
    def mailer(self) -> NotificationMailer:
        if self._mailer is None:
            self._mailer = get_notification_mailer()
        return self._mailer

    def create_notification(
        self,
        *,
        recipient_id: int,
        title: str,
        message: str,
        type: str,
        category: str,
        sender_id: int | None = None,
        priority: str | None = None,
        data: dict[str, Any] | None = None,
        action_required: bool = False,
        action_url: str | None = None,
        expires_at: datetime | None = None,
        send_email: bool = False,
    ) -> Notification:
        """Persist a notification, push it live and optionally email it."""

        priority = priority or PRIORITY_MEDIUM
        _validate(
            recipient_id=recipient_id,
            title=title,
            message=message,
            type=type,
            category=category,
            priority=priority,
        )

        now = now_in_app_timezone()
        saved = self.repository.create(
            Notification(
                id=None,
                recipient_id=recipient_id,
                sender_id=sender_id,
                title=title,
                message=message,
                type=type,
                category=category,
                priority=priority,
                data=dict(data or {}),
                is_read=False,
                action_required=action_required,
                action_url=action_url,
                email_sent=False,
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            )
        )

        self._push(saved)
        if send_email:
            self._email(saved)

        logger.info("Notification created: %s for user %s", saved.type, saved.recipient_id)
        return saved

    def _push(self, notification: Notification) -> None:
        try:
            if self._publisher.is_connected(notification.recipient_id):
                self._publisher.dispatch(notification)
        except Exception:
            logger.exception(
                "Error pushing notification %s to user %s",
                notification.id,
                notification.recipient_id,
            )

    def _email(self, notification: Notification) -> None:
        try:
            self.mailer.schedule(notification)
        except Exception:
            logger.exception("Error scheduling email for notification %s", notification.id)

    def get_user_notifications(
        self,
        recipient_id: int,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        unread_only: bool = False,
        category: str | None = None,
    ) -> NotificationPage:
        """Return a newest-first page of ``recipient_id``'s notifications."""

        page = max(page, 1)
        limit = max(limit, 1)
        notifications = self.repository.list_for_recipient(
            recipient_id,
            offset=(page - 1) * limit,
            limit=limit,
            unread_only=unread_only,
            category=category,
        )
        total = self.repository.count_for_recipient(
            recipient_id, unread_only=unread_only, category=category
        )
        return NotificationPage(
            notifications=list(notifications),
            total=total,
            unread_count=self.repository.count_unread(recipient_id),
            page=page,
            limit=limit,
        )

    def get_unread_count(self, recipient_id: int) -> int:
        return self.repository.count_unread(recipient_id)

    def mark_notifications_as_read(
        self, notification_ids: Iterable[int], *, recipient_id: int | None = None
    ) -> int:
        """Flag the given notifications as read.

        Already read entries are left untouched. When ``recipient_id`` is given,
        ids owned by someone else are ignored.
        """

        return self.repository.mark_as_read(notification_ids, recipient_id=recipient_id)

    def mark_all_as_read(self, recipient_id: int) -> int:
        return self.repository.mark_all_as_read(recipient_id)

    def delete_notification(self, notification_id: int, recipient_id: int) -> bool:
        """Delete a notification owned by ``recipient_id``; otherwise do nothing."""

        return self.repository.delete_for_recipient(notification_id, recipient_id)

    def cleanup_old_notifications(
        self, days_old: int = DEFAULT_RETENTION_DAYS, *, now: datetime | None = None
    ) -> int:
        """Delete read notifications created more than ``days_old`` days ago."""

        cutoff = (now or now_in_app_timezone()) - timedelta(days=days_old)
        deleted = self.repository.delete_read_created_before(cutoff)
        logger.info("Cleaned up %s old notifications", deleted)
        return deleted

    def get_notification_stats(self, recipient_id: int) -> NotificationStats:
        stats = NotificationStats()
        for category, (total, unread) in sorted(
            self.repository.category_counts(recipient_id).items()
        ):
            stats.categories[category] = CategoryStats(total=total, unread=unread)
            stats.total += total
            stats.unread += unread
        return stats

    def get_recent_activity(
        self,
        recipient_id: int,
        *,
        hours: int = 24,
        limit: int = 10,
        now: datetime | None = None,
    ) -> list[Notification]:
        since = (now or now_in_app_timezone()) - timedelta(hours=hours)
        return list(self.repository.list_created_since(recipient_id, since, limit=limit))


def _validate(
    *,
    recipient_id: int | None,
    title: str | None,
    message: str | None,
    type: str | None,
    category: str | None,
    priority: str,
) -> None:
    missing = [
        name
        for name, value in (
            ("recipient_id", recipient_id),
            ("title", title),
            ("message", message),
            ("type", type),
            ("category", category),
        )
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise NotificationValidationError(
            f"Missing required notification fields: {', '.join(missing)}"
        )
    if type not in NOTIFICATION_TYPES:
        raise NotificationValidationError(f"Unknown notification type '{type}'")
    if category not in NOTIFICATION_CATEGORIES:
        raise NotificationValidationError(f"Unknown notification category '{category}'")
    if priority not in NOTIFICATION_PRIORITIES:
        raise NotificationValidationError(f"Unknown notification priority '{priority}'")
    if len(title) > TITLE_MAX_LENGTH:
        raise NotificationValidationError(
            f"Notification title exceeds {TITLE_MAX_LENGTH} characters"
        )
    if len(message) > MESSAGE_MAX_LENGTH:
        raise NotificationValidationError(
            f"Notification message exceeds {MESSAGE_MAX_LENGTH} characters"
        )


__all__ = [
    "CategoryStats",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_RETENTION_DAYS",
    "LivePublisher",
    "NotificationPage",
    "NotificationService",
    "NotificationStats",
    "NotificationValidationError",
]
