"""
StackIt Backend — Notification Service (Fan-out + Read Model)
===============================================================

What:  Creates per-recipient notifications as a side effect of other actions
       and serves the recipient's inbox.
How:   `notify()` persists one Notification row in the caller's transaction,
       then hands `(recipient_id, payload)` to the NotificationHub. The push
       is scheduled, never awaited, so a slow or dead client cannot fail the
       originating request.
Who:   AnswerService (answer / comment / mention / accept), AdminService
       (broadcast), notification routes (read model).

Fan-out rules:
    ┌──────────┬──────────────────────────────┬──────────────────────────────┐
    │ Kind     │ Trigger                      │ Recipient                    │
    ├──────────┼──────────────────────────────┼──────────────────────────────┤
    │ answer   │ answer posted                │ question author              │
    │ comment  │ comment posted               │ answer author                │
    │ mention  │ @username in a comment       │ each distinct resolved user  │
    │ accept   │ answer accepted              │ answer author                │
    │ admin    │ admin broadcast              │ every non-banned user        │
    └──────────┴──────────────────────────────┴──────────────────────────────┘
    A user is never notified of their own action (recipient == sender).

Read-state transitions are monotonic: unread → read only, and repeating a
transition changes nothing.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.notification import Notification, NotificationType
from stackit.models.user import User
from stackit.schemas.common import Pagination
from stackit.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    PushEvent,
)
from stackit.services.realtime import notification_hub

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(r"@(\w+)", re.ASCII)


def extract_mentions(content: str) -> List[str]:
    """Distinct @usernames in order of first appearance."""
    names: List[str] = []
    for name in MENTION_RE.findall(content):
        if name not in names:
            names.append(name)
    return names


class NotificationService:
    """Fan-out writes and the recipient-scoped read model."""

    # ══════════════════════════════════════════════════════════════════════
    # Fan-out
    # ══════════════════════════════════════════════════════════════════════

    async def notify(
        self,
        db: AsyncSession,
        kind: NotificationType,
        recipient_id: UUID,
        sender: Optional[User],
        title: str,
        message: str,
        question_id: Optional[UUID] = None,
        answer_id: Optional[UUID] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        """
        Persists one notification and pushes it to the recipient if connected.

        Returns None (and writes nothing) when the recipient is the sender.
        """
        if sender is not None and sender.id == recipient_id:
            return None

        notification = Notification(
            recipient_id=recipient_id,
            sender=sender,
            type=NotificationType(kind).value,
            title=title,
            message=message,
            question_id=question_id,
            answer_id=answer_id,
            data=data or {},
            is_read=False,
        )
        db.add(notification)
        await db.flush()
        logger.info(
            "Notification %s (%s) → user %s", notification.id, notification.type, recipient_id
        )
        self._push(notification)
        return notification

    async def notify_mentions(
        self,
        db: AsyncSession,
        content: str,
        sender: User,
        question_id: Optional[UUID] = None,
        answer_id: Optional[UUID] = None,
    ) -> List[Notification]:
        """
        Emits one `mention` per distinct resolvable @username in `content`.

        Usernames are matched exactly; unknown names are dropped silently and
        the sender never mentions themselves.
        """
        names = extract_mentions(content)
        if not names:
            return []

        result = await db.execute(select(User).where(User.username.in_(names)))
        by_name = {user.username: user for user in result.scalars().all()}

        created: List[Notification] = []
        for name in names:
            user = by_name.get(name)
            if user is None:
                continue
            notification = await self.notify(
                db,
                NotificationType.MENTION,
                recipient_id=user.id,
                sender=sender,
                title="You were mentioned in a comment",
                message=f'{sender.username} mentioned you in a comment: "{content}"',
                question_id=question_id,
                answer_id=answer_id,
            )
            if notification is not None:
                created.append(notification)
        return created

    async def broadcast(self, db: AsyncSession, sender: User, title: str, message: str) -> int:
        """Sends an `admin` notification to every non-banned user. Returns the recipient count."""
        result = await db.execute(select(User.id).where(User.is_banned.is_(False)))
        recipient_ids = list(result.scalars().all())

        notifications = [
            Notification(
                recipient_id=recipient_id,
                sender=sender,
                type=NotificationType.ADMIN.value,
                title=title,
                message=message,
                data={},
                is_read=False,
            )
            for recipient_id in recipient_ids
        ]
        db.add_all(notifications)
        await db.flush()

        for notification in notifications:
            self._push(notification)
        logger.info("Admin %s broadcast '%s' to %d users", sender.id, title, len(notifications))
        return len(notifications)

    def _push(self, notification: Notification) -> None:
        event = PushEvent(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            question_id=notification.question_id,
            answer_id=notification.answer_id,
            created_at=notification.created_at,
        )
        notification_hub.publish(
            notification.recipient_id, event.model_dump(mode="json", by_alias=True)
        )

    # ══════════════════════════════════════════════════════════════════════
    # Read model (recipient only)
    # ══════════════════════════════════════════════════════════════════════

    async def list_for_user(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
    ) -> NotificationListResponse:
        conditions = [Notification.recipient_id == user.id]
        if unread_only:
            conditions.append(Notification.is_read.is_(False))

        total = await db.scalar(select(func.count(Notification.id)).where(*conditions)) or 0
        result = await db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        notifications = result.scalars().all()

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            pagination=Pagination.build(page, limit, total),
            unread_count=await self.unread_count(db, user),
        )

    async def unread_count(self, db: AsyncSession, user: User) -> int:
        count = await db.scalar(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == user.id,
                Notification.is_read.is_(False),
            )
        )
        return count or 0

    async def _get_owned(self, db: AsyncSession, notification_id: UUID, user: User) -> Notification:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))
        if notification.recipient_id != user.id:
            raise ForbiddenError("Not authorized to access this notification")
        return notification

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user: User) -> Notification:
        notification = await self._get_owned(db, notification_id, user)
        if not notification.is_read:
            notification.is_read = True
            await db.flush()
        return notification

    async def mark_all_read(self, db: AsyncSession, user: User) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.recipient_id == user.id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def mark_many(self, db: AsyncSession, notification_ids: Sequence[UUID], user: User) -> int:
        """Marks the given ids read; ids that belong to someone else are ignored."""
        result = await db.execute(
            update(Notification)
            .where(
                Notification.id.in_(list(notification_ids)),
                Notification.recipient_id == user.id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def delete(self, db: AsyncSession, notification_id: UUID, user: User) -> None:
        notification = await self._get_owned(db, notification_id, user)
        await db.delete(notification)
        await db.flush()

    async def clear_all(self, db: AsyncSession, user: User) -> int:
        result = await db.execute(
            delete(Notification).where(Notification.recipient_id == user.id)
        )
        return result.rowcount or 0


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
