"""
StackIt Backend — Notification WebSocket
==========================================

What:  WS /ws/notifications?token=<jwt>
How:   The token is checked before the socket is accepted; a bad token or a
       banned account closes with 1008 (policy violation). Once connected
       the socket only receives `PushEvent` JSON frames. Anything the client
       sends is read and ignored, which keeps the connection alive and lets
       the server notice disconnects.
"""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from stackit.database import async_session_factory
from stackit.exceptions import AuthenticationError
from stackit.services.auth_service import auth_service
from stackit.services.realtime import notification_hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = Query(default="")):
    async with async_session_factory() as db:
        try:
            user = await auth_service.resolve_token(db, token)
        except AuthenticationError as e:
            logger.info("Rejected realtime connection: %s", e.message)
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    if user.is_banned:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notification_hub.connect(websocket, user.id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        notification_hub.disconnect(websocket, user.id)
