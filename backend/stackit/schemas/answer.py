"""
StackIt Backend — Answer & Comment Schemas
============================================

What:  Request/response contracts for answers, comments and acceptance.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from stackit.config import settings
from stackit.schemas.common import ApiModel, Pagination, UserSummary


def check_answer_content(v: str) -> str:
    if len(v.strip()) < settings.answer_min_length:
        raise ValueError(f"Answer must be at least {settings.answer_min_length} characters long")
    return v


class AnswerCreate(ApiModel):
    content: str
    question_id: uuid.UUID

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_answer_content(v)


class AnswerUpdate(ApiModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_answer_content(v)


class CommentCreate(ApiModel):
    content: str = Field(min_length=1, max_length=settings.comment_max_length)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(
                f"Comment must be between 1 and {settings.comment_max_length} characters"
            )
        return v


class CommentResponse(ApiModel):
    id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    created_at: datetime


class AnswerResponse(ApiModel):
    id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    question_id: uuid.UUID
    upvotes: List[str]
    downvotes: List[str]
    vote_count: int
    is_accepted: bool
    comments: List[CommentResponse]
    created_at: datetime
    updated_at: datetime


class AnswerEnvelope(ApiModel):
    message: str
    answer: AnswerResponse


class AnswerListResponse(ApiModel):
    answers: List[AnswerResponse]
    pagination: Pagination
