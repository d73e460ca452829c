"""
StackIt Backend — Real-time Notification Hub
==============================================

What:  In-process pub/sub of notification events keyed by recipient id.
How:   Each authenticated WebSocket registers under its user's id. Publishing
       schedules the send as a background task on the running loop, so the
       request that produced the notification never waits on a client.
Who:   NotificationService publishes; routes/realtime.py connects/disconnects.

Delivery guarantees:
    - At-most-once; nothing is queued for offline recipients
    - A failing socket is dropped; other sockets of the same user still receive
    - Single process only (connections are not shared across workers)
"""

import asyncio
import logging
from typing import Any, Dict, List, Set
from uuid import UUID

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationHub:
    """Tracks open notification sockets per user."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket, user_id: UUID) -> None:
        await websocket.accept()
        self.active_connections.setdefault(str(user_id), []).append(websocket)
        logger.info("Realtime client connected for user %s", user_id)

    def disconnect(self, websocket: WebSocket, user_id: UUID) -> None:
        key = str(user_id)
        connections = self.active_connections.get(key)
        if not connections:
            return
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            del self.active_connections[key]
        logger.info("Realtime client disconnected for user %s", user_id)

    def connection_count(self) -> int:
        return sum(len(conns) for conns in self.active_connections.values())

    def is_online(self, user_id: UUID) -> bool:
        return bool(self.active_connections.get(str(user_id)))

    def publish(self, user_id: UUID, payload: Dict[str, Any]) -> bool:
        """
        Schedules delivery of `payload` to every socket of `user_id`.

        Returns False without doing anything when the user has no open socket.
        """
        if not self.is_online(user_id):
            return False
        task = asyncio.get_running_loop().create_task(self.send_to_user(user_id, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def send_to_user(self, user_id: UUID, payload: Dict[str, Any]) -> int:
        """Sends to all sockets of a user; returns how many sends succeeded."""
        delivered = 0
        failed: List[WebSocket] = []
        for connection in list(self.active_connections.get(str(user_id), [])):
            try:
                await connection.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping realtime socket for user %s: %s", user_id, e)
                failed.append(connection)

        for connection in failed:
            self.disconnect(connection, user_id)
        return delivered

    async def drain(self) -> None:
        """Waits for scheduled deliveries; used on shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# ── Singleton Instance ────────────────────────────────────────────────────
notification_hub = NotificationHub()
