"""
StackIt Backend — Question Route Handlers
===========================================

What:  /api/questions: listing, detail, authoring, voting and popular tags.
Who:   The home feed, question page and ask form of the web client.

`/questions/tags/popular` is declared before `/questions/{question_id}` so
the literal path wins.
"""

import logging
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.models.user import User
from stackit.routes.deps import get_current_user, get_optional_user
from stackit.schemas.common import ErrorResponse, MessageResponse
from stackit.schemas.question import (
    PopularTagsResponse,
    QuestionCreate,
    QuestionEnvelope,
    QuestionListResponse,
    QuestionRead,
    QuestionUpdate,
    VoteRequest,
    VoteResponse,
)
from stackit.services.question_service import question_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/questions", tags=["Questions"])

NOT_FOUND = {404: {"description": "Question not found or deleted", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Not allowed for this actor", "model": ErrorResponse}}


@router.get(
    "",
    response_model=QuestionListResponse,
    summary="List questions",
    description="Paginated feed with sort, tag filter and text search over title and description.",
)
async def list_questions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: Literal["newest", "votes", "views", "unanswered"] = Query(default="newest"),
    tag: Optional[str] = Query(default=None, max_length=50),
    search: Optional[str] = Query(default=None, max_length=200),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    return await question_service.list_questions(
        db, page=page, limit=limit, sort=sort, tag=tag, search=search
    )


@router.get("/tags/popular", response_model=PopularTagsResponse, summary="Top 20 tags")
async def popular_tags(db: AsyncSession = Depends(get_db_session)) -> PopularTagsResponse:
    return PopularTagsResponse(tags=await question_service.popular_tags(db))


@router.get(
    "/{question_id}",
    response_model=QuestionRead,
    responses=NOT_FOUND,
    summary="Question with its answers",
)
async def get_question(
    question_id: UUID,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionRead:
    """Signed-in reads increment the view counter."""
    question = await question_service.get_question(db, question_id, viewer)
    return QuestionRead(question=question)


@router.post(
    "",
    response_model=QuestionEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Ask a question",
)
async def create_question(
    body: QuestionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionEnvelope:
    question = await question_service.create_question(db, body, user)
    return QuestionEnvelope(
        message="Question created successfully",
        question=await question_service.build_detail(db, question),
    )


@router.put(
    "/{question_id}",
    response_model=QuestionEnvelope,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Edit a question (author or admin)",
)
async def update_question(
    question_id: UUID,
    body: QuestionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionEnvelope:
    question = await question_service.update_question(db, question_id, body, user)
    return QuestionEnvelope(
        message="Question updated successfully",
        question=await question_service.build_detail(db, question),
    )


@router.delete(
    "/{question_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Soft-delete a question (author or admin)",
)
async def delete_question(
    question_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await question_service.delete_question(db, question_id, user)
    return MessageResponse(message="Question deleted successfully")


@router.post(
    "/{question_id}/vote",
    response_model=VoteResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Upvote, downvote or withdraw a vote",
)
async def vote_question(
    question_id: UUID,
    body: VoteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VoteResponse:
    vote_count = await question_service.vote(db, question_id, user, body.vote_type)
    return VoteResponse(vote_count=vote_count)
