"""
StackIt Backend — User Directory Service
==========================================

What:  Public profiles, per-user content listings, activity summary, user
       search and the leaderboard.
How:   Banned users are invisible on every public route here: profile and
       content lookups report them as not found, search and leaderboard
       skip them.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import NotFoundError, ValidationError
from stackit.models.answer import Answer
from stackit.models.question import Question
from stackit.models.user import User
from stackit.schemas.answer import AnswerListResponse, AnswerResponse
from stackit.schemas.common import Pagination
from stackit.schemas.question import QuestionListResponse, QuestionSummary
from stackit.schemas.user import (
    ActivityCounts,
    ActivityResponse,
    RecentAnswer,
    RecentQuestion,
    UserListResponse,
    UserProfile,
)

logger = logging.getLogger(__name__)

LEADERBOARD_FIELDS = {
    "reputation": User.reputation,
    "questions": User.questions_count,
    "answers": User.answers_count,
    "accepted": User.accepted_answers_count,
}

RECENT_ITEMS = 5


class UserService:
    """Read side of the User Directory."""

    async def get_visible_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await db.get(User, user_id)
        if user is None or user.is_banned:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> UserProfile:
        return UserProfile.model_validate(await self.get_visible_user(db, user_id))

    async def list_questions(
        self, db: AsyncSession, user_id: UUID, page: int = 1, limit: int = 10
    ) -> QuestionListResponse:
        await self.get_visible_user(db, user_id)
        conditions = (Question.author_id == user_id, Question.is_deleted.is_(False))

        total = await db.scalar(select(func.count(Question.id)).where(*conditions)) or 0
        result = await db.execute(
            select(Question)
            .where(*conditions)
            .order_by(Question.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return QuestionListResponse(
            questions=[QuestionSummary.model_validate(q) for q in result.scalars().all()],
            pagination=Pagination.build(page, limit, total),
        )

    async def list_answers(
        self, db: AsyncSession, user_id: UUID, page: int = 1, limit: int = 10
    ) -> AnswerListResponse:
        await self.get_visible_user(db, user_id)
        conditions = (Answer.author_id == user_id, Answer.is_deleted.is_(False))

        total = await db.scalar(select(func.count(Answer.id)).where(*conditions)) or 0
        result = await db.execute(
            select(Answer)
            .where(*conditions)
            .order_by(Answer.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return AnswerListResponse(
            answers=[AnswerResponse.model_validate(a) for a in result.scalars().all()],
            pagination=Pagination.build(page, limit, total),
        )

    async def activity(self, db: AsyncSession, user_id: UUID) -> ActivityResponse:
        """Live content counts plus the five most recent questions and answers."""
        user = await self.get_visible_user(db, user_id)

        live_questions = (Question.author_id == user_id, Question.is_deleted.is_(False))
        live_answers = (Answer.author_id == user_id, Answer.is_deleted.is_(False))

        questions = await db.scalar(select(func.count(Question.id)).where(*live_questions)) or 0
        answers = await db.scalar(select(func.count(Answer.id)).where(*live_answers)) or 0
        accepted = await db.scalar(
            select(func.count(Answer.id)).where(*live_answers, Answer.is_accepted.is_(True))
        ) or 0

        recent_questions = await db.execute(
            select(Question)
            .where(*live_questions)
            .order_by(Question.created_at.desc())
            .limit(RECENT_ITEMS)
        )
        recent_answers = await db.execute(
            select(Answer, Question.title)
            .join(Question, Question.id == Answer.question_id)
            .where(*live_answers)
            .order_by(Answer.created_at.desc())
            .limit(RECENT_ITEMS)
        )

        return ActivityResponse(
            activity=ActivityCounts(
                questions=questions,
                answers=answers,
                accepted_answers=accepted,
                reputation=user.reputation,
            ),
            recent_questions=[
                RecentQuestion.model_validate(q) for q in recent_questions.scalars().all()
            ],
            recent_answers=[
                RecentAnswer(
                    id=answer.id,
                    question_id=answer.question_id,
                    question_title=title,
                    content=answer.content,
                    vote_count=answer.vote_count,
                    is_accepted=answer.is_accepted,
                    created_at=answer.created_at,
                )
                for answer, title in recent_answers.all()
            ],
        )

    async def search(
        self, db: AsyncSession, query: str, page: int = 1, limit: int = 10
    ) -> UserListResponse:
        """Case-insensitive username/email substring match over non-banned users."""
        term = (query or "").strip()
        if len(term) < 2:
            raise ValidationError("Search query must be at least 2 characters", field="q")

        pattern = f"%{term}%"
        conditions = (
            User.is_banned.is_(False),
            or_(User.username.ilike(pattern), User.email.ilike(pattern)),
        )
        total = await db.scalar(select(func.count(User.id)).where(*conditions)) or 0
        result = await db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.reputation.desc(), User.username.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return UserListResponse(
            users=[UserProfile.model_validate(u) for u in result.scalars().all()],
            pagination=Pagination.build(page, limit, total),
        )

    async def leaderboard(
        self, db: AsyncSession, board: str = "reputation", limit: int = 10
    ) -> List[UserProfile]:
        field = LEADERBOARD_FIELDS.get(board, User.reputation)
        result = await db.execute(
            select(User)
            .where(User.is_banned.is_(False))
            .order_by(field.desc(), User.username.asc())
            .limit(limit)
        )
        return [UserProfile.model_validate(u) for u in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
