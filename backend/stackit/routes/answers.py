"""
StackIt Backend — Answer Route Handlers
=========================================

What:  /api/answers: post, edit, delete, vote, accept and comment.
How:   Each handler resolves the actor, calls AnswerService once and returns
       the updated answer (or the new vote count for votes). Notifications
       produced along the way are written in the same request transaction.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.models.user import User
from stackit.routes.deps import get_current_user
from stackit.schemas.answer import (
    AnswerCreate,
    AnswerEnvelope,
    AnswerResponse,
    AnswerUpdate,
    CommentCreate,
)
from stackit.schemas.common import ErrorResponse, MessageResponse
from stackit.schemas.question import VoteRequest, VoteResponse
from stackit.services.answer_service import answer_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/answers", tags=["Answers"])

NOT_FOUND = {404: {"description": "Answer or question not found", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Not allowed for this actor", "model": ErrorResponse}}


@router.post(
    "",
    response_model=AnswerEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        **NOT_FOUND,
        **FORBIDDEN,
        409: {"description": "Question closed or already answered", "model": ErrorResponse},
    },
    summary="Answer a question",
)
async def create_answer(
    body: AnswerCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerEnvelope:
    answer = await answer_service.create_answer(db, body, user)
    return AnswerEnvelope(
        message="Answer posted successfully",
        answer=AnswerResponse.model_validate(answer),
    )


@router.put(
    "/{answer_id}",
    response_model=AnswerEnvelope,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Edit an answer (author or admin)",
)
async def update_answer(
    answer_id: UUID,
    body: AnswerUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerEnvelope:
    answer = await answer_service.update_answer(db, answer_id, body, user)
    return AnswerEnvelope(
        message="Answer updated successfully",
        answer=AnswerResponse.model_validate(answer),
    )


@router.delete(
    "/{answer_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Soft-delete an answer (author or admin)",
)
async def delete_answer(
    answer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await answer_service.delete_answer(db, answer_id, user)
    return MessageResponse(message="Answer deleted successfully")


@router.post(
    "/{answer_id}/vote",
    response_model=VoteResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Upvote, downvote or withdraw a vote",
)
async def vote_answer(
    answer_id: UUID,
    body: VoteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VoteResponse:
    vote_count = await answer_service.vote(db, answer_id, user, body.vote_type)
    return VoteResponse(vote_count=vote_count)


@router.post(
    "/{answer_id}/accept",
    response_model=AnswerEnvelope,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Accept an answer (question author only)",
)
async def accept_answer(
    answer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerEnvelope:
    answer = await answer_service.accept_answer(db, answer_id, user)
    return AnswerEnvelope(
        message="Answer accepted successfully",
        answer=AnswerResponse.model_validate(answer),
    )


@router.post(
    "/{answer_id}/comments",
    response_model=AnswerEnvelope,
    responses=NOT_FOUND,
    summary="Comment on an answer",
)
async def add_comment(
    answer_id: UUID,
    body: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerEnvelope:
    answer = await answer_service.add_comment(db, answer_id, body.content, user)
    return AnswerEnvelope(
        message="Comment added successfully",
        answer=AnswerResponse.model_validate(answer),
    )
