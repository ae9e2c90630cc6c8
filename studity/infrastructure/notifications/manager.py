"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user.

    The registry is best effort: it only reflects sockets handled by this
    process and is never persisted. Persisted notifications remain the source
    of truth for anything a user missed while disconnected.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self.register(user_id, websocket)

    def register(self, user_id: int, websocket: WebSocket) -> None:
        """Register an already accepted ``websocket`` for ``user_id``."""

        self._connections[user_id].add(websocket)
        logger.debug("Websocket registered for user %s", user_id)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)
        logger.debug("Websocket removed for user %s", user_id)

    def is_connected(self, user_id: int) -> bool:
        """Return ``True`` when ``user_id`` has at least one live connection."""

        return bool(self._connections.get(user_id))

    def connected_user_ids(self) -> list[int]:
        return [user_id for user_id, sockets in self._connections.items() if sockets]

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``user_id``."""

        connections = list(self._connections.get(user_id, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:
                logger.warning(
                    "Dropping websocket for user %s after a failed send", user_id
                )
                self.disconnect(user_id, connection)


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
