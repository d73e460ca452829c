"""
StackIt Backend — User & Auth Schemas
=======================================

What:  Request/response contracts for registration, login, profiles,
       activity, search and leaderboard.

Visibility:
    - UserProfile: public card (never email, ban state or password hash)
    - AccountView: what a user sees about themselves (adds email)
    - AdminUserView: moderation view (adds ban state)
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from stackit.schemas.common import ApiModel, Pagination

USERNAME_RE = re.compile(r"^\w+$", re.ASCII)


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames must be @mention-able: letters, digits and underscore only."""
        v = v.strip()
        if not USERNAME_RE.match(v):
            raise ValueError("Username may only contain letters, digits and underscores")
        return v


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class UserProfile(ApiModel):
    id: uuid.UUID
    username: str
    role: str
    avatar: str = ""
    reputation: int = 0
    questions_count: int = 0
    answers_count: int = 0
    accepted_answers_count: int = 0
    created_at: datetime


class AccountView(UserProfile):
    email: str


class AdminUserView(AccountView):
    is_banned: bool
    ban_reason: str = ""


class AuthResponse(ApiModel):
    message: str
    token: str
    user: AccountView


class AccountResponse(ApiModel):
    user: AccountView


class ProfileResponse(ApiModel):
    user: UserProfile


class UserListResponse(ApiModel):
    users: List[UserProfile]
    pagination: Optional[Pagination] = None


class ActivityCounts(ApiModel):
    questions: int
    answers: int
    accepted_answers: int
    reputation: int


class RecentQuestion(ApiModel):
    id: uuid.UUID
    title: str
    vote_count: int
    created_at: datetime


class RecentAnswer(ApiModel):
    id: uuid.UUID
    question_id: uuid.UUID
    question_title: str
    content: str
    vote_count: int
    is_accepted: bool
    created_at: datetime


class ActivityResponse(ApiModel):
    activity: ActivityCounts
    recent_questions: List[RecentQuestion]
    recent_answers: List[RecentAnswer]
