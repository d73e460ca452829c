"""
StackIt Backend — Moderation Schemas
======================================

What:  Contracts for the admin dashboard, user moderation and reports.

Reports are computed on demand; each report type has its own shape and the
envelope carries the requested `type` so clients can switch on it.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import Field

from stackit.schemas.common import ApiModel, Pagination
from stackit.schemas.question import TagCount
from stackit.schemas.user import AdminUserView


class BanRequest(ApiModel):
    is_banned: bool
    ban_reason: Optional[str] = Field(default=None, max_length=500)


class RoleRequest(ApiModel):
    role: Literal["user", "admin"]


class AdminUserEnvelope(ApiModel):
    message: str
    user: AdminUserView


class AdminUserListResponse(ApiModel):
    users: List[AdminUserView]
    pagination: Pagination


class DashboardStats(ApiModel):
    total_users: int
    total_questions: int
    total_answers: int
    banned_users: int


class RecentUser(ApiModel):
    id: uuid.UUID
    username: str
    email: str
    role: str
    created_at: datetime


class RecentQuestionItem(ApiModel):
    id: uuid.UUID
    title: str
    author_username: Optional[str] = None
    created_at: datetime


class DashboardResponse(ApiModel):
    stats: DashboardStats
    recent_users: List[RecentUser]
    recent_questions: List[RecentQuestionItem]


class GeneralReport(ApiModel):
    total_users: int
    banned_users: int
    total_questions: int
    total_answers: int
    unread_notifications: int


class UserActivityStats(ApiModel):
    total_users: int
    active_users: int
    banned_users: int
    avg_reputation: float


class RecentRegistration(ApiModel):
    id: uuid.UUID
    username: str
    email: str
    reputation: int
    created_at: datetime


class UserActivityReport(ApiModel):
    stats: UserActivityStats
    recent_registrations: List[RecentRegistration]


class ContentStatsReport(ApiModel):
    total_questions: int
    total_answers: int
    unanswered_questions: int
    avg_views: float
    popular_tags: List[TagCount]


class ReportResponse(ApiModel):
    type: str
    report: Union[GeneralReport, UserActivityReport, ContentStatsReport]
