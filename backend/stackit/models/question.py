"""
StackIt Backend — Question SQLAlchemy Models
==============================================

What:  ORM models for the `questions` and `question_tags` tables.
Who:   QuestionService (CRUD, listing), AnswerService (answer list,
       acceptance), AdminService (moderation, reports).

Invariants:
    - A user id is in at most one of upvotes/downvotes (see VoteSet)
    - vote_count == len(upvotes) - len(downvotes)
    - accepted_answer_id, when set, names an Answer of this Question whose
      is_accepted flag is True; no other Answer of this Question is accepted
    - answer_count tracks the live answers attached to this Question

Query Patterns:
    - Listing: WHERE is_deleted = false ORDER BY created_at DESC
      → idx_questions_live_created
    - By author: WHERE author_id = :id AND is_deleted = false
    - By tag: question_tags(name) → question ids
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit.database import Base
from stackit.models.user import User, utcnow
from stackit.models.votes import VotableMixin


class QuestionTag(Base):
    """One normalized (trimmed, lowercase) tag attached to a question."""

    __tablename__ = "question_tags"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("questions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Question(VotableMixin, Base):
    """A question, with its embedded vote sets and tag list."""

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Nullable: the author row may be removed by an admin while the
    # (soft-deleted) question is kept for the record.
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author: Mapped[Optional[User]] = relationship(lazy="selectin")

    tag_links: Mapped[List[QuestionTag]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=QuestionTag.position,
    )

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answer_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Live answers attached to this question",
    )

    # Plain reference: the previously accepted answer may no longer exist.
    accepted_answer_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
        comment="Soft-delete flag; deleted questions are hidden from every public query",
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
        Index("idx_questions_live_created", "is_deleted", "created_at"),
    )

    @property
    def tags(self) -> List[str]:
        return [link.name for link in self.tag_links]

    @tags.setter
    def tags(self, names: List[str]) -> None:
        # Existing rows are reused so an unchanged tag is never deleted and re-inserted
        existing = {link.name: link for link in (self.tag_links or [])}
        links = []
        for position, name in enumerate(names):
            link = existing.get(name) or QuestionTag(name=name)
            link.position = position
            links.append(link)
        self.tag_links = links

    @property
    def has_accepted_answer(self) -> bool:
        return self.accepted_answer_id is not None

    def __repr__(self) -> str:
        return (
            f"<Question(id={self.id}, votes={self.vote_count}, "
            f"answers={self.answer_count}, deleted={self.is_deleted})>"
        )
