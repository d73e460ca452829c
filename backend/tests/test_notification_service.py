"""
StackIt Backend — Notification Service Tests
==============================================

What:  Fan-out writes and the recipient-scoped read model.

What we test:
    ✅ No self-notification, ever
    ✅ Push is handed to the hub with a camelCase payload
    ✅ Only the recipient can read or delete a notification
    ✅ mark_many ignores other users' ids
    ✅ Read transitions are monotonic and idempotent
    ✅ Broadcast skips banned users
"""

from unittest.mock import patch
from uuid import uuid4

import pytest

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.notification import NotificationType
from stackit.services.notification_service import NotificationService, extract_mentions


class TestExtractMentions:
    def test_distinct_in_order(self):
        assert extract_mentions("@bob hi @alice, @bob again") == ["bob", "alice"]

    def test_no_mentions(self):
        assert extract_mentions("email me at nobody") == []

    def test_word_characters_only(self):
        assert extract_mentions("ping @dev_ops-team!") == ["dev_ops"]

    def test_ascii_word_characters(self):
        assert extract_mentions("thanks @bobé!") == ["bob"]


class TestNotify:
    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_self_notification_is_suppressed(self, db_session, make_user):
        alice = await make_user("alice")

        result = await self.service.notify(
            db_session, NotificationType.COMMENT, alice.id, alice, "t", "m"
        )

        assert result is None
        assert await self.service.unread_count(db_session, alice) == 0

    @pytest.mark.asyncio
    async def test_notify_persists_and_pushes(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")

        with patch("stackit.services.notification_service.notification_hub") as hub:
            notification = await self.service.notify(
                db_session,
                NotificationType.ANSWER,
                recipient_id=alice.id,
                sender=bob,
                title="New answer to your question",
                message="bob answered your question",
            )

        assert notification.recipient_id == alice.id
        assert notification.sender_id == bob.id
        assert notification.type == "answer"
        assert notification.is_read is False

        hub.publish.assert_called_once()
        recipient, payload = hub.publish.call_args.args
        assert recipient == alice.id
        assert payload["event"] == "notification"
        assert payload["id"] == str(notification.id)
        assert payload["type"] == "answer"
        assert "createdAt" in payload

    @pytest.mark.asyncio
    async def test_offline_push_is_not_an_error(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")

        notification = await self.service.notify(
            db_session, NotificationType.VOTE, alice.id, bob, "Vote", "Someone voted"
        )
        assert notification is not None


class TestReadModel:
    def setup_method(self):
        self.service = NotificationService()

    async def _seed(self, db, make_user, count=3):
        alice = await make_user("alice")
        bob = await make_user("bob")
        created = []
        for i in range(count):
            created.append(
                await self.service.notify(
                    db, NotificationType.ANSWER, alice.id, bob, f"Title {i}", f"Message {i}"
                )
            )
        return alice, bob, created

    @pytest.mark.asyncio
    async def test_list_and_unread_count(self, db_session, make_user):
        alice, bob, _ = await self._seed(db_session, make_user)

        inbox = await self.service.list_for_user(db_session, alice, page=1, limit=2)

        assert len(inbox.notifications) == 2
        assert inbox.pagination.total == 2
        assert inbox.pagination.has_next is True
        assert inbox.unread_count == 3
        assert inbox.notifications[0].sender.username == "bob"

        empty = await self.service.list_for_user(db_session, bob)
        assert empty.notifications == []
        assert empty.unread_count == 0

    @pytest.mark.asyncio
    async def test_mark_read_is_idempotent(self, db_session, make_user):
        alice, _, created = await self._seed(db_session, make_user)

        await self.service.mark_read(db_session, created[0].id, alice)
        await self.service.mark_read(db_session, created[0].id, alice)

        assert created[0].is_read is True
        assert await self.service.unread_count(db_session, alice) == 2

    @pytest.mark.asyncio
    async def test_mark_read_by_other_user_forbidden(self, db_session, make_user):
        _, bob, created = await self._seed(db_session, make_user)

        with pytest.raises(ForbiddenError, match="Not authorized"):
            await self.service.mark_read(db_session, created[0].id, bob)
        assert created[0].is_read is False

    @pytest.mark.asyncio
    async def test_mark_read_unknown_not_found(self, db_session, make_user):
        alice = await make_user("alice")
        with pytest.raises(NotFoundError):
            await self.service.mark_read(db_session, uuid4(), alice)

    @pytest.mark.asyncio
    async def test_mark_many_ignores_foreign_ids(self, db_session, make_user):
        alice, bob, created = await self._seed(db_session, make_user)
        carol = await make_user("carol")
        bobs = await self.service.notify(
            db_session, NotificationType.ANSWER, bob.id, carol, "For bob", "Only bob reads this"
        )

        updated = await self.service.mark_many(
            db_session, [created[0].id, created[1].id, bobs.id], alice
        )

        assert updated == 2
        assert await self.service.unread_count(db_session, alice) == 1
        assert await self.service.unread_count(db_session, bob) == 1

    @pytest.mark.asyncio
    async def test_mark_all_read_then_again(self, db_session, make_user):
        alice, _, _ = await self._seed(db_session, make_user)

        assert await self.service.mark_all_read(db_session, alice) == 3
        assert await self.service.mark_all_read(db_session, alice) == 0
        assert await self.service.unread_count(db_session, alice) == 0

    @pytest.mark.asyncio
    async def test_unread_only_filter(self, db_session, make_user):
        alice, _, created = await self._seed(db_session, make_user)
        await self.service.mark_read(db_session, created[1].id, alice)

        inbox = await self.service.list_for_user(db_session, alice, unread_only=True)

        assert {n.id for n in inbox.notifications} == {created[0].id, created[2].id}

    @pytest.mark.asyncio
    async def test_delete_and_clear_all(self, db_session, make_user):
        alice, bob, created = await self._seed(db_session, make_user)

        with pytest.raises(ForbiddenError):
            await self.service.delete(db_session, created[0].id, bob)

        await self.service.delete(db_session, created[0].id, alice)
        assert await self.service.unread_count(db_session, alice) == 2

        assert await self.service.clear_all(db_session, alice) == 2
        inbox = await self.service.list_for_user(db_session, alice)
        assert inbox.notifications == []


class TestBroadcast:
    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_broadcast_skips_banned_users(self, db_session, make_user):
        admin = await make_user("root", role="admin")
        alice = await make_user("alice")
        troll = await make_user("troll", is_banned=True)

        sent = await self.service.broadcast(
            db_session, admin, "Maintenance", "Read-only mode at 02:00 UTC"
        )

        assert sent == 2
        assert await self.service.unread_count(db_session, alice) == 1
        assert await self.service.unread_count(db_session, admin) == 1
        assert await self.service.unread_count(db_session, troll) == 0
