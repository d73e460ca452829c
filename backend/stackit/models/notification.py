"""
StackIt Backend — Notification SQLAlchemy Model
=================================================

What:  ORM model for the `notifications` table.
Who:   Written by NotificationService (fan-out); read-state changed only by
       the recipient; purged by AdminService when a user is deleted.

Index (recipient_id, is_read, created_at):
    Serves both the notification dropdown (newest first) and the unread
    badge count without a table scan.
"""

import enum
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit.database import Base
from stackit.models.user import User, utcnow


class NotificationType(str, enum.Enum):
    ANSWER = "answer"
    COMMENT = "comment"
    MENTION = "mention"
    VOTE = "vote"
    ACCEPT = "accept"
    ADMIN = "admin"


class Notification(Base):
    """A per-recipient notice produced as a side effect of another action."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sender: Mapped[Optional[User]] = relationship(foreign_keys=[sender_id], lazy="selectin")

    type: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="answer | comment | mention | vote | accept | admin",
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    question_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="SET NULL"), nullable=True,
    )
    answer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("answers.id", ondelete="SET NULL"), nullable=True,
    )

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, type='{self.type}', "
            f"recipient={self.recipient_id}, read={self.is_read})>"
        )
