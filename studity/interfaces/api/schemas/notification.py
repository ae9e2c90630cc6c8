"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    recipient_id: int
    sender_id: int | None = None
    title: str
    message: str
    type: str
    category: str
    priority: str
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    action_required: bool
    action_url: str | None = None
    email_sent: bool
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationPageRead(BaseModel):
    notifications: list[NotificationRead]
    total: int
    unread_count: int
    page: int
    limit: int
    pages: int

    model_config = ConfigDict(from_attributes=True)


class UnreadCountRead(BaseModel):
    unread_count: int


class MarkReadResult(BaseModel):
    updated: int = Field(..., description="Number of notifications flagged as read")


class CategoryStatsRead(BaseModel):
    total: int
    unread: int

    model_config = ConfigDict(from_attributes=True)


class NotificationStatsRead(BaseModel):
    total: int
    unread: int
    categories: dict[str, CategoryStatsRead] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "CategoryStatsRead",
    "MarkReadResult",
    "NotificationMarkReadRequest",
    "NotificationPageRead",
    "NotificationRead",
    "NotificationStatsRead",
    "UnreadCountRead",
]
