"""
StackIt Backend — Moderation Service
======================================

What:  Everything behind /api/admin: dashboard, user moderation, question
       moderation, broadcast and on-demand reports.
Who:   Admin routes only; callers have already passed `require_admin`.

User deletion cascade (DELETE /api/admin/users/{id}):
    1. Soft-delete every question they authored
    2. Soft-delete every answer they authored (detached from its question)
    3. Purge notifications where they are sender or recipient
    4. Remove the user row
    Admin accounts are protected from both ban and deletion.

Reports are aggregated on every call; nothing is maintained incrementally.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.answer import Answer
from stackit.models.notification import Notification
from stackit.models.question import Question
from stackit.models.user import User
from stackit.schemas.admin import (
    AdminUserListResponse,
    ContentStatsReport,
    DashboardResponse,
    DashboardStats,
    GeneralReport,
    RecentQuestionItem,
    RecentRegistration,
    RecentUser,
    ReportResponse,
    UserActivityReport,
    UserActivityStats,
)
from stackit.schemas.common import Pagination
from stackit.schemas.question import ModerationQuestion, ModerationQuestionListResponse
from stackit.schemas.user import AdminUserView
from stackit.services.auth_service import is_admin
from stackit.services.notification_service import notification_service
from stackit.services.question_service import question_service, search_condition

logger = logging.getLogger(__name__)

DEFAULT_BAN_REASON = "Violation of platform policies"
REPORT_TYPES = ("general", "user-activity", "content-stats")


class AdminService:
    """Moderation operations and platform statistics."""

    async def _count(self, db: AsyncSession, column, *conditions) -> int:
        return await db.scalar(select(func.count(column)).where(*conditions)) or 0

    async def _get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    # ── Dashboard ─────────────────────────────────────────────────────────

    async def dashboard(self, db: AsyncSession) -> DashboardResponse:
        stats = DashboardStats(
            total_users=await self._count(db, User.id),
            total_questions=await self._count(db, Question.id, Question.is_deleted.is_(False)),
            total_answers=await self._count(db, Answer.id, Answer.is_deleted.is_(False)),
            banned_users=await self._count(db, User.id, User.is_banned.is_(True)),
        )

        users = await db.execute(select(User).order_by(User.created_at.desc()).limit(10))
        questions = await db.execute(
            select(Question)
            .where(Question.is_deleted.is_(False))
            .order_by(Question.created_at.desc())
            .limit(10)
        )
        return DashboardResponse(
            stats=stats,
            recent_users=[RecentUser.model_validate(u) for u in users.scalars().all()],
            recent_questions=[
                RecentQuestionItem(
                    id=q.id,
                    title=q.title,
                    author_username=q.author.username if q.author else None,
                    created_at=q.created_at,
                )
                for q in questions.scalars().all()
            ],
        )

    # ── Users ─────────────────────────────────────────────────────────────

    async def list_users(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        role: Optional[str] = None,
        banned: Optional[bool] = None,
    ) -> AdminUserListResponse:
        conditions = []
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            conditions.append(or_(User.username.ilike(pattern), User.email.ilike(pattern)))
        if role:
            conditions.append(User.role == role)
        if banned is not None:
            conditions.append(User.is_banned.is_(banned))

        total = await self._count(db, User.id, *conditions)
        result = await db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return AdminUserListResponse(
            users=[AdminUserView.model_validate(u) for u in result.scalars().all()],
            pagination=Pagination.build(page, limit, total),
        )

    async def set_ban(
        self, db: AsyncSession, user_id: UUID, is_banned: bool, reason: Optional[str] = None
    ) -> User:
        user = await self._get_user(db, user_id)
        if is_admin(user):
            raise ForbiddenError("Cannot ban admin users")

        user.is_banned = is_banned
        user.ban_reason = (reason or DEFAULT_BAN_REASON) if is_banned else ""
        await db.flush()
        logger.info("User %s %s", user.id, "banned" if is_banned else "unbanned")
        return user

    async def set_role(self, db: AsyncSession, user_id: UUID, role: str) -> User:
        user = await self._get_user(db, user_id)
        user.role = role
        await db.flush()
        logger.info("User %s role set to %s", user.id, role)
        return user

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        user = await self._get_user(db, user_id)
        if is_admin(user):
            raise ForbiddenError("Cannot delete admin users")

        questions = await db.execute(select(Question).where(Question.author_id == user.id))
        for question in questions.scalars().all():
            question.is_deleted = True

        answers = await db.execute(select(Answer).where(Answer.author_id == user.id))
        for answer in answers.scalars().all():
            if answer.is_deleted:
                continue
            answer.is_deleted = True
            parent = await db.get(Question, answer.question_id)
            if parent is not None and parent.answer_count > 0:
                parent.answer_count -= 1
        await db.flush()

        purged = await db.execute(
            delete(Notification).where(
                or_(Notification.recipient_id == user.id, Notification.sender_id == user.id)
            )
        )
        await db.delete(user)
        await db.flush()
        logger.info(
            "User %s deleted; content soft-deleted, %d notifications purged",
            user_id, purged.rowcount or 0,
        )

    # ── Questions ─────────────────────────────────────────────────────────

    async def list_questions(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 20,
        status: str = "all",
        search: Optional[str] = None,
    ) -> ModerationQuestionListResponse:
        conditions = []
        if status == "deleted":
            conditions.append(Question.is_deleted.is_(True))
        elif status == "active":
            conditions.append(Question.is_deleted.is_(False))
        if search and search.strip():
            conditions.append(search_condition(search))

        total = await self._count(db, Question.id, *conditions)
        result = await db.execute(
            select(Question)
            .where(*conditions)
            .order_by(Question.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return ModerationQuestionListResponse(
            questions=[ModerationQuestion.model_validate(q) for q in result.scalars().all()],
            pagination=Pagination.build(page, limit, total),
        )

    async def _get_question(self, db: AsyncSession, question_id: UUID) -> Question:
        question = await db.get(Question, question_id)
        if question is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        return question

    async def restore_question(self, db: AsyncSession, question_id: UUID) -> Question:
        """Clears the question's own deleted flag; answers and counters are left alone."""
        question = await self._get_question(db, question_id)
        question.is_deleted = False
        await db.flush()
        logger.info("Question %s restored", question.id)
        return question

    async def set_closed(self, db: AsyncSession, question_id: UUID, is_closed: bool) -> Question:
        question = await self._get_question(db, question_id)
        question.is_closed = is_closed
        await db.flush()
        return question

    async def broadcast(self, db: AsyncSession, admin: User, title: str, message: str) -> int:
        return await notification_service.broadcast(db, admin, title, message)

    # ── Reports ───────────────────────────────────────────────────────────

    async def report(self, db: AsyncSession, report_type: str = "general") -> ReportResponse:
        """Unknown report types fall back to `general`."""
        if report_type == "user-activity":
            return ReportResponse(type=report_type, report=await self._user_activity(db))
        if report_type == "content-stats":
            return ReportResponse(type=report_type, report=await self._content_stats(db))
        return ReportResponse(type="general", report=await self._general(db))

    async def _general(self, db: AsyncSession) -> GeneralReport:
        return GeneralReport(
            total_users=await self._count(db, User.id),
            banned_users=await self._count(db, User.id, User.is_banned.is_(True)),
            total_questions=await self._count(db, Question.id, Question.is_deleted.is_(False)),
            total_answers=await self._count(db, Answer.id, Answer.is_deleted.is_(False)),
            unread_notifications=await self._count(
                db, Notification.id, Notification.is_read.is_(False)
            ),
        )

    async def _user_activity(self, db: AsyncSession) -> UserActivityReport:
        total = await self._count(db, User.id)
        banned = await self._count(db, User.id, User.is_banned.is_(True))
        avg_reputation = await db.scalar(select(func.avg(User.reputation)))

        recent = await db.execute(
            select(User)
            .where(User.is_banned.is_(False))
            .order_by(User.created_at.desc())
            .limit(10)
        )
        return UserActivityReport(
            stats=UserActivityStats(
                total_users=total,
                active_users=total - banned,
                banned_users=banned,
                avg_reputation=float(avg_reputation or 0),
            ),
            recent_registrations=[
                RecentRegistration.model_validate(u) for u in recent.scalars().all()
            ],
        )

    async def _content_stats(self, db: AsyncSession) -> ContentStatsReport:
        live = Question.is_deleted.is_(False)
        avg_views = await db.scalar(select(func.avg(Question.views)).where(live))
        return ContentStatsReport(
            total_questions=await self._count(db, Question.id, live),
            total_answers=await self._count(db, Answer.id, Answer.is_deleted.is_(False)),
            unanswered_questions=await self._count(db, Question.id, live, Question.answer_count == 0),
            avg_views=float(avg_views or 0),
            popular_tags=await question_service.popular_tags(db, limit=10),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
admin_service = AdminService()
