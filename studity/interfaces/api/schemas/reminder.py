"""Reminder schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .notification import NotificationRead


class ManualReminderRequest(BaseModel):
    reminder_type: Literal["24h", "1h"] = Field(
        "1h", description="Lead time announced by the reminder"
    )


class ManualReminderRead(BaseModel):
    booking_id: int
    reminder_type: str
    notifications: list[NotificationRead]


class ReminderStatsRead(BaseModel):
    upcoming_today: int
    upcoming_tomorrow: int
    upcoming_this_week: int
    last_checked: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["ManualReminderRead", "ManualReminderRequest", "ReminderStatsRead"]
