"""
StackIt Backend — Shared Pydantic Schemas
===========================================

What:  Base model, pagination envelope and error/health contracts used by
       every resource schema.
How:   `ApiModel` serializes snake_case attributes as camelCase JSON
       (`vote_count` → `voteCount`) and accepts either spelling on input.
       FastAPI renders response models by alias, so the wire format is
       camelCase throughout.
"""

import math
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for all request/response schemas."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(BaseModel):
    """
    Page-number pagination state returned next to every list.

    Fields:
        current:  1-based page that was served
        total:    Number of pages for the current filter
        has_next / has_prev: Navigation hints for the client
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "Pagination":
        return cls(
            current=page,
            total=math.ceil(total_items / limit) if limit else 0,
            has_next=page * limit < total_items,
            has_prev=page > 1,
        )


class UserSummary(ApiModel):
    """Author/sender card embedded in content responses."""

    id: uuid.UUID
    username: str
    avatar: str = ""
    reputation: int = 0


class MessageResponse(ApiModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Cannot vote on your own answer",
            "details": {},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    realtime_connections: int = Field(description="Open notification WebSocket connections")
    uptime_seconds: float = Field(description="Seconds since service started")
    checked_at: datetime = Field(description="When this check ran (UTC)")
