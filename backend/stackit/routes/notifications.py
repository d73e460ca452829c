"""
StackIt Backend — Notification Route Handlers
===============================================

What:  The signed-in user's inbox: list, unread badge, read-state changes,
       delete and clear.
Who:   Every handler is scoped to the actor; nobody can read or change
       another user's notifications.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.models.user import User
from stackit.routes.deps import get_current_user
from stackit.schemas.common import ErrorResponse, MessageResponse
from stackit.schemas.notification import (
    MarkManyRequest,
    NotificationListResponse,
    NotificationResponse,
    ReadStateResponse,
    UnreadCountResponse,
)
from stackit.services.notification_service import notification_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

OWNED = {
    403: {"description": "Not the recipient", "model": ErrorResponse},
    404: {"description": "Notification not found", "model": ErrorResponse},
}


@router.get("", response_model=NotificationListResponse, summary="Inbox, newest first")
async def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    unread: bool = Query(default=False, description="Only unread notifications"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationListResponse:
    return await notification_service.list_for_user(
        db, user, page=page, limit=limit, unread_only=unread
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await notification_service.unread_count(db, user))


@router.put("/read-all", response_model=ReadStateResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReadStateResponse:
    updated = await notification_service.mark_all_read(db, user)
    return ReadStateResponse(message="All notifications marked as read", updated=updated)


@router.put("/read-multiple", response_model=ReadStateResponse)
async def mark_many_read(
    body: MarkManyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReadStateResponse:
    updated = await notification_service.mark_many(db, body.notification_ids, user)
    return ReadStateResponse(message="Notifications marked as read", updated=updated)


@router.put("/{notification_id}/read", response_model=NotificationResponse, responses=OWNED)
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    notification = await notification_service.mark_read(db, notification_id, user)
    return NotificationResponse.model_validate(notification)


@router.delete("/clear-all", response_model=ReadStateResponse)
async def clear_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReadStateResponse:
    removed = await notification_service.clear_all(db, user)
    return ReadStateResponse(message="All notifications cleared", updated=removed)


@router.delete("/{notification_id}", response_model=MessageResponse, responses=OWNED)
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await notification_service.delete(db, notification_id, user)
    return MessageResponse(message="Notification deleted successfully")
