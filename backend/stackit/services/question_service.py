"""
StackIt Backend — Question Service
====================================

What:  Listing, retrieval, authoring and voting for Questions.
How:   Stateless singleton; every method receives the request session and,
       for mutations, the already-authenticated actor. Business checks run
       before any attribute is touched, so a rejected request writes nothing.
Who:   Question routes; AdminService reuses the listing helpers.

Listing (GET /api/questions):
    sort=newest      → created_at DESC
    sort=votes       → vote_count DESC, created_at DESC
    sort=views       → views DESC, created_at DESC
    sort=unanswered  → answer_count = 0, created_at DESC
    tag=<name>       → question_tags.name = lower(name)
    search=<text>    → title or description contains text (case-insensitive)
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.answer import Answer
from stackit.models.question import Question, QuestionTag
from stackit.models.user import User
from stackit.models.votes import VoteType
from stackit.schemas.answer import AnswerResponse
from stackit.schemas.common import Pagination
from stackit.schemas.question import (
    QuestionCreate,
    QuestionDetail,
    QuestionListResponse,
    QuestionSummary,
    QuestionUpdate,
    TagCount,
)
from stackit.services.auth_service import is_admin
from stackit.services.vote_engine import apply_vote

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "votes", "views", "unanswered")


def search_condition(search: str):
    pattern = f"%{search.strip()}%"
    return or_(Question.title.ilike(pattern), Question.description.ilike(pattern))


def tag_condition(tag: str):
    return Question.id.in_(
        select(QuestionTag.question_id).where(QuestionTag.name == tag.strip().lower())
    )


class QuestionService:
    """Business logic for the Question half of the Content Store."""

    async def get_live_question(self, db: AsyncSession, question_id: UUID) -> Question:
        """Soft-deleted questions are reported exactly like missing ones."""
        question = await db.get(Question, question_id)
        if question is None or question.is_deleted:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        return question

    async def live_answers(self, db: AsyncSession, question_id: UUID) -> List[Answer]:
        """The question's answer list: non-deleted answers in creation order."""
        result = await db.execute(
            select(Answer)
            .where(Answer.question_id == question_id, Answer.is_deleted.is_(False))
            .order_by(Answer.created_at.asc())
        )
        return list(result.scalars().all())

    async def build_detail(self, db: AsyncSession, question: Question) -> QuestionDetail:
        answers = await self.live_answers(db, question.id)
        summary = QuestionSummary.model_validate(question)
        return QuestionDetail(
            **summary.model_dump(),
            upvotes=list(question.upvotes or []),
            downvotes=list(question.downvotes or []),
            answers=[AnswerResponse.model_validate(a) for a in answers],
        )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_questions(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        sort: str = "newest",
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> QuestionListResponse:
        conditions = [Question.is_deleted.is_(False)]
        if tag:
            conditions.append(tag_condition(tag))
        if search and search.strip():
            conditions.append(search_condition(search))
        if sort == "unanswered":
            conditions.append(Question.answer_count == 0)

        if sort == "votes":
            order = (Question.vote_count.desc(), Question.created_at.desc())
        elif sort == "views":
            order = (Question.views.desc(), Question.created_at.desc())
        else:
            order = (Question.created_at.desc(),)

        total = await db.scalar(select(func.count(Question.id)).where(*conditions)) or 0
        result = await db.execute(
            select(Question)
            .where(*conditions)
            .order_by(*order)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        questions = result.scalars().all()

        return QuestionListResponse(
            questions=[QuestionSummary.model_validate(q) for q in questions],
            pagination=Pagination.build(page, limit, total),
        )

    async def get_question(
        self, db: AsyncSession, question_id: UUID, viewer: Optional[User] = None
    ) -> QuestionDetail:
        """Authenticated reads count as a view; anonymous reads do not."""
        question = await self.get_live_question(db, question_id)
        if viewer is not None:
            question.views += 1
            await db.flush()
        return await self.build_detail(db, question)

    async def popular_tags(self, db: AsyncSession, limit: int = 20) -> List[TagCount]:
        count = func.count(QuestionTag.question_id).label("count")
        result = await db.execute(
            select(QuestionTag.name, count)
            .join(Question, Question.id == QuestionTag.question_id)
            .where(Question.is_deleted.is_(False))
            .group_by(QuestionTag.name)
            .order_by(count.desc(), QuestionTag.name.asc())
            .limit(limit)
        )
        return [TagCount(name=name, count=n) for name, n in result.all()]

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_question(self, db: AsyncSession, data: QuestionCreate, author: User) -> Question:
        question = Question(
            title=data.title,
            description=data.description,
            author=author,
            upvotes=[],
            downvotes=[],
            vote_count=0,
            views=0,
            answer_count=0,
            accepted_answer_id=None,
        )
        question.tags = data.tags
        db.add(question)
        author.questions_count += 1
        await db.flush()
        logger.info("Question %s created by %s", question.id, author.id)
        return question

    async def update_question(
        self, db: AsyncSession, question_id: UUID, data: QuestionUpdate, actor: User
    ) -> Question:
        question = await self.get_live_question(db, question_id)
        if question.author_id != actor.id and not is_admin(actor):
            raise ForbiddenError("Not authorized to update this question")

        if data.title is not None:
            question.title = data.title
        if data.description is not None:
            question.description = data.description
        if data.tags is not None:
            question.tags = data.tags
        await db.flush()
        logger.info("Question %s updated by %s", question.id, actor.id)
        return question

    async def delete_question(self, db: AsyncSession, question_id: UUID, actor: User) -> None:
        """Soft delete; the question's answers are left as they are."""
        question = await self.get_live_question(db, question_id)
        if question.author_id != actor.id and not is_admin(actor):
            raise ForbiddenError("Not authorized to delete this question")

        question.is_deleted = True
        if question.author_id is not None:
            author = await db.get(User, question.author_id)
            if author is not None and author.questions_count > 0:
                author.questions_count -= 1
        await db.flush()
        logger.info("Question %s soft-deleted by %s", question.id, actor.id)

    async def vote(
        self, db: AsyncSession, question_id: UUID, actor: User, vote_type: VoteType
    ) -> int:
        question = await db.get(Question, question_id)
        if question is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        count = apply_vote(question, actor.id, vote_type)
        await db.flush()
        return count


# ── Singleton Instance ────────────────────────────────────────────────────
question_service = QuestionService()
