"""
StackIt Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table (the User Directory).
Who:   Read by every service for author identity; counters are adjusted by
       the content services, ban/role state by the moderation service.

Lifecycle:
    1. Created on registration (role='user', counters at 0)
    2. Counters move with content actions (questions, answers, acceptances)
    3. Ban state and role change only through admin actions
    4. Hard-deleted only by an admin; their content is soft-deleted first and
       their notifications purged (see AdminService.delete_user)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from stackit.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    A registered account.

    Uniqueness of username and email is enforced by the database indexes;
    the service layer checks first so it can report a friendly message.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    username: Mapped[str] = mapped_column(
        String(30), nullable=False, unique=True, index=True,
        comment="Public handle, also the target of @mentions",
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
        comment="Stored lowercased",
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        server_default=text("'user'"),
        comment="guest | user | admin",
    )
    avatar: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ── Moderation ────────────────────────────────────────────────────────
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ban_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # ── Counters ──────────────────────────────────────────────────────────
    questions_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answers_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accepted_answers_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
