from .notification import (
    CategoryStatsRead,
    MarkReadResult,
    NotificationMarkReadRequest,
    NotificationPageRead,
    NotificationRead,
    NotificationStatsRead,
    UnreadCountRead,
)
from .reminder import ManualReminderRead, ManualReminderRequest, ReminderStatsRead

__all__ = [
    "CategoryStatsRead",
    "ManualReminderRead",
    "ManualReminderRequest",
    "MarkReadResult",
    "NotificationMarkReadRequest",
    "NotificationPageRead",
    "NotificationRead",
    "NotificationStatsRead",
    "ReminderStatsRead",
    "UnreadCountRead",
]
