"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPE_BOOKING_PENDING = "booking_pending"
NOTIFICATION_TYPE_BOOKING_APPROVED = "booking_approved"
NOTIFICATION_TYPE_BOOKING_REJECTED = "booking_rejected"
NOTIFICATION_TYPE_PAYMENT_RECEIVED = "payment_received"
NOTIFICATION_TYPE_PAYMENT_REFUNDED = "payment_refunded"
NOTIFICATION_TYPE_CLASS_REMINDER = "class_reminder"
NOTIFICATION_TYPE_MESSAGE = "message"
NOTIFICATION_TYPE_GENERAL = "general"

NOTIFICATION_TYPES = frozenset(
    {
        NOTIFICATION_TYPE_BOOKING_PENDING,
        NOTIFICATION_TYPE_BOOKING_APPROVED,
        NOTIFICATION_TYPE_BOOKING_REJECTED,
        NOTIFICATION_TYPE_PAYMENT_RECEIVED,
        NOTIFICATION_TYPE_PAYMENT_REFUNDED,
        NOTIFICATION_TYPE_CLASS_REMINDER,
        NOTIFICATION_TYPE_MESSAGE,
        NOTIFICATION_TYPE_GENERAL,
    }
)

NOTIFICATION_CATEGORIES = frozenset(
    {"booking", "payment", "message", "reminder", "system"}
)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"

NOTIFICATION_PRIORITIES = frozenset(
    {PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH, PRIORITY_URGENT}
)

TITLE_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 500


@dataclass
class Notification:
    """Information message delivered to a specific user.

    Only ``is_read``, ``email_sent`` and ``updated_at`` change after creation;
    ``data`` is a snapshot of the triggering event and is never re-derived.
    """

    id: int | None
    recipient_id: int
    title: str
    message: str
    type: str
    category: str
    sender_id: int | None = None
    priority: str = PRIORITY_MEDIUM
    data: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    action_required: bool = False
    action_url: str | None = None
    email_sent: bool = False
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = [
    "Notification",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPE_BOOKING_PENDING",
    "NOTIFICATION_TYPE_BOOKING_APPROVED",
    "NOTIFICATION_TYPE_BOOKING_REJECTED",
    "NOTIFICATION_TYPE_PAYMENT_RECEIVED",
    "NOTIFICATION_TYPE_PAYMENT_REFUNDED",
    "NOTIFICATION_TYPE_CLASS_REMINDER",
    "NOTIFICATION_TYPE_MESSAGE",
    "NOTIFICATION_TYPE_GENERAL",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "TITLE_MAX_LENGTH",
    "MESSAGE_MAX_LENGTH",
]
