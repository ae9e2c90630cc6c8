"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
)
from sqlalchemy.sql import expression

from studity.infrastructure.database import Base
from studity.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_read", "recipient_id", "is_read"),
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    type = Column(String(32), nullable=False, index=True)
    category = Column(String(16), nullable=False, index=True)
    priority = Column(String(10), nullable=False, default="medium")
    data = Column(JSON, nullable=False, default=dict)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    action_required = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    action_url = Column(String(255), nullable=True)
    email_sent = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    expires_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
