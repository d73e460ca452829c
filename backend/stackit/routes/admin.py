"""
StackIt Backend — Admin Route Handlers
========================================

What:  /api/admin: dashboard, user and question moderation, broadcast and
       reports. Every handler depends on `require_admin`.
"""

import logging
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.models.user import User
from stackit.routes.deps import require_admin
from stackit.schemas.admin import (
    AdminUserEnvelope,
    AdminUserListResponse,
    BanRequest,
    DashboardResponse,
    ReportResponse,
    RoleRequest,
)
from stackit.schemas.common import ErrorResponse, MessageResponse
from stackit.schemas.notification import BroadcastRequest, BroadcastResponse
from stackit.schemas.question import (
    CloseRequest,
    ModerationQuestion,
    ModerationQuestionEnvelope,
    ModerationQuestionListResponse,
)
from stackit.schemas.user import AdminUserView
from stackit.services.admin_service import admin_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/admin", tags=["Admin"])

PROTECTED = {
    403: {"description": "Admin accounts cannot be banned or deleted", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> DashboardResponse:
    return await admin_service.dashboard(db)


# ── Users ─────────────────────────────────────────────────────────────────


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: Optional[str] = Query(default=None, max_length=100),
    role: Optional[Literal["guest", "user", "admin"]] = Query(default=None),
    banned: Optional[bool] = Query(default=None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminUserListResponse:
    return await admin_service.list_users(
        db, page=page, limit=limit, search=search, role=role, banned=banned
    )


@router.put("/users/{user_id}/ban", response_model=AdminUserEnvelope, responses=PROTECTED)
async def ban_user(
    user_id: UUID,
    body: BanRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminUserEnvelope:
    user = await admin_service.set_ban(db, user_id, body.is_banned, body.ban_reason)
    logger.info("Admin %s changed ban state of %s", admin.id, user_id)
    return AdminUserEnvelope(
        message=f"User {'banned' if body.is_banned else 'unbanned'} successfully",
        user=AdminUserView.model_validate(user),
    )


@router.put("/users/{user_id}/role", response_model=AdminUserEnvelope, responses=PROTECTED)
async def change_role(
    user_id: UUID,
    body: RoleRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminUserEnvelope:
    user = await admin_service.set_role(db, user_id, body.role)
    return AdminUserEnvelope(
        message="User role updated successfully",
        user=AdminUserView.model_validate(user),
    )


@router.delete("/users/{user_id}", response_model=MessageResponse, responses=PROTECTED)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await admin_service.delete_user(db, user_id)
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return MessageResponse(message="User deleted successfully")


# ── Questions ─────────────────────────────────────────────────────────────


@router.get("/questions", response_model=ModerationQuestionListResponse)
async def list_questions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Literal["all", "active", "deleted"] = Query(default="all"),
    search: Optional[str] = Query(default=None, max_length=200),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ModerationQuestionListResponse:
    return await admin_service.list_questions(
        db, page=page, limit=limit, status=status, search=search
    )


@router.put("/questions/{question_id}/restore", response_model=ModerationQuestionEnvelope)
async def restore_question(
    question_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ModerationQuestionEnvelope:
    question = await admin_service.restore_question(db, question_id)
    return ModerationQuestionEnvelope(
        message="Question restored successfully",
        question=ModerationQuestion.model_validate(question),
    )


@router.put("/questions/{question_id}/close", response_model=ModerationQuestionEnvelope)
async def close_question(
    question_id: UUID,
    body: CloseRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ModerationQuestionEnvelope:
    question = await admin_service.set_closed(db, question_id, body.is_closed)
    return ModerationQuestionEnvelope(
        message=f"Question {'closed' if body.is_closed else 'reopened'} successfully",
        question=ModerationQuestion.model_validate(question),
    )


# ── Broadcast & Reports ───────────────────────────────────────────────────


@router.post("/notifications/broadcast", response_model=BroadcastResponse)
async def broadcast(
    body: BroadcastRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BroadcastResponse:
    recipients = await admin_service.broadcast(db, admin, body.title, body.message)
    return BroadcastResponse(
        message=f"Broadcast notification sent to {recipients} users",
        recipients=recipients,
    )


@router.get("/reports", response_model=ReportResponse)
async def reports(
    type: str = Query(default="general", description="general | user-activity | content-stats"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ReportResponse:
    return await admin_service.report(db, type)
