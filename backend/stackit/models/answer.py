"""
StackIt Backend — Answer & Comment SQLAlchemy Models
======================================================

What:  ORM models for the `answers` and `answer_comments` tables.
Who:   AnswerService (create, vote, accept, comment) and the moderation layer.

Lifecycle (Answer):
    1. Created on submission; one live answer per author per question is
       enforced by AnswerService at creation time
    2. Votes mutate upvotes/downvotes/vote_count only
    3. is_accepted flips through the acceptance workflow
    4. Soft-deleted by author/admin: detached from the question's answer list

Comments are an ordered child collection of the answer (created_at ASC).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit.database import Base
from stackit.models.user import User, utcnow
from stackit.models.votes import VotableMixin


class Comment(Base):
    """A comment embedded under an answer."""

    __tablename__ = "answer_comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("answers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    author: Mapped[Optional[User]] = relationship(lazy="selectin")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class Answer(VotableMixin, Base):
    """An answer to a question, with its embedded vote sets and comments."""

    __tablename__ = "answers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author: Mapped[Optional[User]] = relationship(lazy="selectin")

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    comments: Mapped[List[Comment]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=Comment.created_at,
    )

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

    __table_args__ = (
        Index("idx_answers_question_live", "question_id", "is_deleted"),
    )

    def __repr__(self) -> str:
        return (
            f"<Answer(id={self.id}, question={self.question_id}, "
            f"votes={self.vote_count}, accepted={self.is_accepted})>"
        )
