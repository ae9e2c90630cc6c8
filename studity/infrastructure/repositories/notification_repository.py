"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from studity.domain.entities import Notification
from studity.infrastructure.models import NotificationModel
from studity.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_recipient(
        self,
        recipient_id: int,
        *,
        offset: int = 0,
        limit: int | None = 20,
        unread_only: bool = False,
        category: str | None = None,
    ) -> Sequence[Notification]:
        query = self._filtered(recipient_id, unread_only=unread_only, category=category)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_recipient(
        self,
        recipient_id: int,
        *,
        unread_only: bool = False,
        category: str | None = None,
    ) -> int:
        return self._filtered(
            recipient_id, unread_only=unread_only, category=category
        ).count()

    def count_unread(self, recipient_id: int) -> int:
        return self.count_for_recipient(recipient_id, unread_only=True)

    def list_created_since(
        self, recipient_id: int, since: datetime, *, limit: int = 10
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def category_counts(self, recipient_id: int) -> dict[str, tuple[int, int]]:
        """Return ``{category: (total, unread)}`` for ``recipient_id``."""

        unread = func.sum(case((NotificationModel.is_read.is_(False), 1), else_=0))
        rows = (
            self.session.query(
                NotificationModel.category,
                func.count(NotificationModel.id),
                unread,
            )
            .filter(NotificationModel.recipient_id == recipient_id)
            .group_by(NotificationModel.category)
            .all()
        )
        return {
            category: (int(total or 0), int(unread_count or 0))
            for category, total, unread_count in rows
        }

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self._commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(
        self, notification_ids: Iterable[int], *, recipient_id: int | None = None
    ) -> int:
        ids = [
            notification_id
            for notification_id in notification_ids
            if notification_id is not None
        ]
        if not ids:
            return 0
        query = self.session.query(NotificationModel).filter(
            NotificationModel.id.in_(ids),
            NotificationModel.is_read.is_(False),
        )
        if recipient_id is not None:
            query = query.filter(NotificationModel.recipient_id == recipient_id)
        updated = query.update(
            {
                NotificationModel.is_read: True,
                NotificationModel.updated_at: self._now(),
            },
            synchronize_session=False,
        )
        self._commit()
        return updated

    def mark_all_as_read(self, recipient_id: int) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.is_read.is_(False),
            )
            .update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.updated_at: self._now(),
                },
                synchronize_session=False,
            )
        )
        self._commit()
        return updated

    def mark_email_sent(self, notification_id: int) -> bool:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .update(
                {
                    NotificationModel.email_sent: True,
                    NotificationModel.updated_at: self._now(),
                },
                synchronize_session=False,
            )
        )
        self._commit()
        return bool(updated)

    def delete_for_recipient(self, notification_id: int, recipient_id: int) -> bool:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == recipient_id,
            )
            .delete(synchronize_session=False)
        )
        self._commit()
        return bool(deleted)

    def delete_read_created_before(self, cutoff: datetime) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.is_read.is_(True),
                NotificationModel.created_at < ensure_app_naive_datetime(cutoff),
            )
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted

    def _commit(self) -> None:
        """Commit, rolling back on failure so the session stays usable."""

        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def _filtered(
        self,
        recipient_id: int,
        *,
        unread_only: bool,
        category: str | None,
    ) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == recipient_id
        )
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        if category:
            query = query.filter(NotificationModel.category == category)
        return query

    @staticmethod
    def _now() -> datetime:
        return ensure_app_naive_datetime(now_in_app_timezone())

    @classmethod
    def _apply_entity_to_model(
        cls, model: NotificationModel, notification: Notification
    ) -> None:
        created_at = ensure_app_naive_datetime(notification.created_at) or cls._now()
        model.created_at = created_at
        model.updated_at = ensure_app_naive_datetime(notification.updated_at) or created_at
        model.recipient_id = notification.recipient_id
        model.sender_id = notification.sender_id
        model.title = notification.title
        model.message = notification.message
        model.type = notification.type
        model.category = notification.category
        model.priority = notification.priority
        model.data = notification.data or {}
        model.is_read = notification.is_read
        model.action_required = notification.action_required
        model.action_url = notification.action_url
        model.email_sent = notification.email_sent
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            title=model.title,
            message=model.message,
            type=model.type,
            category=model.category,
            priority=model.priority,
            data=model.data or {},
            is_read=bool(model.is_read),
            action_required=bool(model.action_required),
            action_url=model.action_url,
            email_sent=bool(model.email_sent),
            expires_at=ensure_app_timezone(model.expires_at),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRepository"]
