"""
StackIt Backend — User Directory Route Handlers
=================================================

What:  Public profile pages, per-user content, search and leaderboard.

`/users/search` and `/users/leaderboard` are registered before
`/users/{user_id}`; declaration order decides which route matches.
"""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.schemas.answer import AnswerListResponse
from stackit.schemas.common import ErrorResponse
from stackit.schemas.question import QuestionListResponse
from stackit.schemas.user import ActivityResponse, ProfileResponse, UserListResponse
from stackit.services.user_service import user_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found or banned", "model": ErrorResponse}}


@router.get(
    "/search",
    response_model=UserListResponse,
    responses={400: {"description": "Query shorter than 2 characters", "model": ErrorResponse}},
    summary="Search users by username or email",
)
async def search_users(
    q: str = Query(default="", max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await user_service.search(db, q, page=page, limit=limit)


@router.get("/leaderboard", response_model=UserListResponse, summary="Top users")
async def leaderboard(
    type: Literal["reputation", "questions", "answers", "accepted"] = Query(default="reputation"),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return UserListResponse(users=await user_service.leaderboard(db, board=type, limit=limit))


@router.get("/{user_id}", response_model=ProfileResponse, responses=NOT_FOUND)
async def get_profile(user_id: UUID, db: AsyncSession = Depends(get_db_session)) -> ProfileResponse:
    return ProfileResponse(user=await user_service.get_profile(db, user_id))


@router.get("/{user_id}/questions", response_model=QuestionListResponse, responses=NOT_FOUND)
async def user_questions(
    user_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    return await user_service.list_questions(db, user_id, page=page, limit=limit)


@router.get("/{user_id}/answers", response_model=AnswerListResponse, responses=NOT_FOUND)
async def user_answers(
    user_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerListResponse:
    return await user_service.list_answers(db, user_id, page=page, limit=limit)


@router.get("/{user_id}/activity", response_model=ActivityResponse, responses=NOT_FOUND)
async def user_activity(
    user_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> ActivityResponse:
    return await user_service.activity(db, user_id)
