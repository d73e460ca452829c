"""
StackIt Backend — Notification Hub Tests
==========================================

What:  In-process push delivery to connected WebSocket clients.
How:   Fake sockets (AsyncMock) stand in for Starlette WebSockets.

What we test:
    ✅ Offline recipients: publish is a no-op returning False
    ✅ Every socket of the recipient receives the payload
    ✅ A failing socket is dropped, the others keep receiving
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from stackit.services.realtime import NotificationHub


def fake_socket(fail=False):
    socket = AsyncMock()
    if fail:
        socket.send_json.side_effect = RuntimeError("connection closed")
    return socket


class TestNotificationHub:
    def setup_method(self):
        self.hub = NotificationHub()

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self):
        user_id = uuid4()
        socket = fake_socket()

        await self.hub.connect(socket, user_id)
        socket.accept.assert_awaited_once()
        assert self.hub.is_online(user_id)
        assert self.hub.connection_count() == 1

        self.hub.disconnect(socket, user_id)
        assert not self.hub.is_online(user_id)
        assert self.hub.connection_count() == 0

        # Disconnecting twice is harmless
        self.hub.disconnect(socket, user_id)

    @pytest.mark.asyncio
    async def test_publish_to_offline_user(self):
        assert self.hub.publish(uuid4(), {"event": "notification"}) is False

    @pytest.mark.asyncio
    async def test_publish_reaches_every_socket(self):
        user_id = uuid4()
        first, second = fake_socket(), fake_socket()
        other = fake_socket()
        await self.hub.connect(first, user_id)
        await self.hub.connect(second, user_id)
        await self.hub.connect(other, uuid4())

        assert self.hub.publish(user_id, {"event": "notification", "type": "answer"}) is True
        await self.hub.drain()

        first.send_json.assert_awaited_once_with({"event": "notification", "type": "answer"})
        second.send_json.assert_awaited_once()
        other.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_socket_is_dropped(self):
        user_id = uuid4()
        broken, healthy = fake_socket(fail=True), fake_socket()
        await self.hub.connect(broken, user_id)
        await self.hub.connect(healthy, user_id)

        delivered = await self.hub.send_to_user(user_id, {"event": "notification"})

        assert delivered == 1
        assert self.hub.active_connections[str(user_id)] == [healthy]

        await self.hub.send_to_user(user_id, {"event": "notification"})
        assert broken.send_json.await_count == 1
        assert healthy.send_json.await_count == 2
