"""
StackIt Backend — Notification Schemas
========================================

What:  Contracts for the notification dropdown, read-state changes and the
       admin broadcast, plus the payload pushed over the WebSocket.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from stackit.schemas.common import ApiModel, Pagination, UserSummary


class NotificationResponse(ApiModel):
    id: uuid.UUID
    type: str
    title: str
    message: str
    sender: Optional[UserSummary] = None
    question_id: Optional[uuid.UUID] = None
    answer_id: Optional[uuid.UUID] = None
    is_read: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class NotificationListResponse(ApiModel):
    notifications: List[NotificationResponse]
    pagination: Pagination
    unread_count: int


class UnreadCountResponse(ApiModel):
    unread_count: int


class MarkManyRequest(ApiModel):
    notification_ids: List[uuid.UUID] = Field(min_length=1)


class ReadStateResponse(ApiModel):
    message: str
    updated: int


class BroadcastRequest(ApiModel):
    title: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=500)


class BroadcastResponse(ApiModel):
    message: str
    recipients: int


class PushEvent(ApiModel):
    """What a connected client receives on `/ws/notifications`."""

    event: str = "notification"
    id: uuid.UUID
    type: str
    title: str
    message: str
    question_id: Optional[uuid.UUID] = None
    answer_id: Optional[uuid.UUID] = None
    created_at: datetime
