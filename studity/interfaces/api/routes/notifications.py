"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from studity.application.use_cases.notifications import NotificationService
from studity.domain.entities import User
from studity.infrastructure.database import SessionLocal
from studity.infrastructure.notifications import (
    notification_manager,
    serialize_notification,
)
from studity.infrastructure.repositories import NotificationRepository
from studity.interfaces.api.dependencies import (
    get_current_active_user,
    get_notification_service,
    resolve_current_user,
)
from studity.interfaces.api.schemas import (
    MarkReadResult,
    NotificationMarkReadRequest,
    NotificationPageRead,
    NotificationRead,
    NotificationStatsRead,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

PENDING_ON_CONNECT_LIMIT = 50


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    category: str | None = None,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    """Return a newest-first page of the authenticated user's notifications."""

    result = service.get_user_notifications(
        current_user.id,
        page=page,
        limit=limit,
        unread_only=unread_only,
        category=category,
    )
    return NotificationPageRead.model_validate(result)


@router.get("/unread-count", response_model=UnreadCountRead)
def read_unread_count(
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    return UnreadCountRead(unread_count=service.get_unread_count(current_user.id))


@router.get("/stats", response_model=NotificationStatsRead)
def read_notification_stats(
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    """Return totals and unread counts grouped by category."""

    return NotificationStatsRead.model_validate(
        service.get_notification_stats(current_user.id)
    )


@router.get("/recent", response_model=list[NotificationRead])
def read_recent_activity(
    hours: int = Query(24, ge=1, le=24 * 30),
    limit: int = Query(10, ge=1, le=100),
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    notifications = service.get_recent_activity(
        current_user.id, hours=hours, limit=limit
    )
    return [NotificationRead.model_validate(item) for item in notifications]


@router.patch("/mark-read", response_model=MarkReadResult)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    """Flag the given notifications as read; ids owned by others are ignored."""

    updated = service.mark_notifications_as_read(
        payload.unique_ids(), recipient_id=current_user.id
    )
    return MarkReadResult(updated=updated)


@router.patch("/mark-all-read", response_model=MarkReadResult)
def mark_all_notifications_read(
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
):
    return MarkReadResult(updated=service.mark_all_as_read(current_user.id))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    service: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> None:
    """Delete a notification of the authenticated user.

    Deleting an unknown id or one owned by someone else is a silent no-op.
    """

    service.delete_notification(notification_id, current_user.id)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
        pending_notifications = NotificationRepository(session).list_for_recipient(
            user.id, limit=PENDING_ON_CONNECT_LIMIT, unread_only=True
        )
    except HTTPException:
        await websocket.close(code=1008)
        return
    except Exception:
        logger.exception("Error opening notification websocket")
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        if pending_notifications:
            await websocket.send_json(
                {
                    "type": "init",
                    "data": [serialize_notification(n) for n in pending_notifications],
                }
            )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    _acknowledge(user.id, ids)
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user.id, websocket)
    except Exception:
        notification_manager.disconnect(user.id, websocket)
        raise


def _acknowledge(user_id: int, ids: list) -> None:
    valid_ids = [value for value in ids if isinstance(value, int)]
    if not valid_ids:
        return
    ack_session = SessionLocal()
    try:
        NotificationService(ack_session).mark_notifications_as_read(
            valid_ids, recipient_id=user_id
        )
    finally:
        ack_session.close()
