"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    NEW_NOTIFICATION_EVENT,
    NotificationPublisher,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "NEW_NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
