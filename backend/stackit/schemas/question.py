"""
StackIt Backend — Question Schemas
====================================

What:  Request/response contracts for questions, votes and tags.

Tag normalization (applied on create and update):
    trim → lowercase → drop empty or over-long → de-duplicate → keep first 5
    At least one tag must survive; 1–5 tags must be sent.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from stackit.config import settings
from stackit.models.votes import VoteType
from stackit.schemas.answer import AnswerResponse
from stackit.schemas.common import ApiModel, Pagination, UserSummary


def normalize_tags(tags: List[str]) -> List[str]:
    """Applies the tag rules; raises ValueError when nothing valid is left."""
    clean: List[str] = []
    for tag in tags:
        name = tag.strip().lower()
        if 0 < len(name) <= settings.tag_max_length and name not in clean:
            clean.append(name)
    clean = clean[: settings.max_tags]
    if not clean:
        raise ValueError("At least one valid tag is required")
    return clean


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


def check_title(v: str) -> str:
    """Strips the title and re-checks its length on the stripped value."""
    v = v.strip()
    if not settings.title_min_length <= len(v) <= settings.title_max_length:
        raise ValueError(
            f"Title must be between {settings.title_min_length} "
            f"and {settings.title_max_length} characters"
        )
    return v


class QuestionCreate(ApiModel):
    title: str = Field(min_length=settings.title_min_length, max_length=settings.title_max_length)
    description: str = Field(min_length=settings.description_min_length)
    tags: List[str] = Field(min_length=1, max_length=settings.max_tags)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return check_title(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class QuestionUpdate(ApiModel):
    """Partial update; omitted fields are left unchanged."""

    title: Optional[str] = Field(
        default=None, min_length=settings.title_min_length, max_length=settings.title_max_length
    )
    description: Optional[str] = Field(default=None, min_length=settings.description_min_length)
    tags: Optional[List[str]] = Field(default=None, min_length=1, max_length=settings.max_tags)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return check_title(v) if v is not None else None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(v) if v is not None else None


class VoteRequest(ApiModel):
    vote_type: VoteType


class CloseRequest(ApiModel):
    is_closed: bool


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class QuestionSummary(ApiModel):
    """List item: everything except the answers themselves."""

    id: uuid.UUID
    title: str
    description: str
    author: Optional[UserSummary] = None
    tags: List[str]
    vote_count: int
    views: int
    answer_count: int
    accepted_answer_id: Optional[uuid.UUID] = None
    has_accepted_answer: bool
    is_closed: bool
    created_at: datetime
    updated_at: datetime


class ModerationQuestion(QuestionSummary):
    is_deleted: bool


class QuestionDetail(QuestionSummary):
    upvotes: List[str]
    downvotes: List[str]
    answers: List[AnswerResponse]


class QuestionListResponse(ApiModel):
    questions: List[QuestionSummary]
    pagination: Pagination


class ModerationQuestionListResponse(ApiModel):
    questions: List[ModerationQuestion]
    pagination: Pagination


class QuestionRead(ApiModel):
    question: QuestionDetail


class QuestionEnvelope(QuestionRead):
    message: str


class ModerationQuestionEnvelope(ApiModel):
    message: str
    question: ModerationQuestion


class VoteResponse(ApiModel):
    message: str = "Vote updated successfully"
    vote_count: int


class TagCount(ApiModel):
    name: str
    count: int


class PopularTagsResponse(ApiModel):
    tags: List[TagCount]
