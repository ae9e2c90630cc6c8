"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from studity.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

NEW_NOTIFICATION_EVENT = "new_notification"

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and schedule their delivery.

    Delivery is fire-and-forget: the send is scheduled on the event loop and
    no acknowledgement is awaited.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task] = set()

    def is_connected(self, user_id: int) -> bool:
        return self._manager.is_connected(user_id)

    def dispatch(self, notification: Notification) -> None:
        """Schedule ``notification`` to be delivered to its recipient."""

        message = {
            "type": NEW_NOTIFICATION_EVENT,
            "data": serialize_notification(notification),
        }
        user_id = notification.recipient_id
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called from a worker thread (sync route or scheduler tick).
            try:
                from_thread.run_sync(self._schedule_send, user_id, message)
            except RuntimeError:
                logger.warning(
                    "No event loop available to push notification %s to user %s",
                    notification.id,
                    user_id,
                )
        else:
            self._schedule_send(user_id, message)

    def _schedule_send(self, user_id: int, message: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(
            self._manager.send_to_user(user_id, message)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "priority": notification.priority,
        "category": notification.category,
        "actionRequired": notification.action_required,
        "actionUrl": notification.action_url,
        "data": notification.data or {},
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


notification_publisher = NotificationPublisher(notification_manager)


__all__ = [
    "NEW_NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
