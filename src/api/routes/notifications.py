from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session
from src.api.schemas.common import ApiResponse
from src.api.schemas.notifications import MarkAllReadResult, NotificationItem, UnreadCount
from src.domain import User
from src.domain.errors import NotificationNotFoundError
from src.domain.services.notifications import NotificationService
from src.infrastructure.db.models import Notification

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _notification_item(notification: Notification) -> NotificationItem:
    return NotificationItem(
        id=notification.id,
        user_id=notification.user_id,
        message=notification.message,
        type=notification.type,
        read=notification.read,
        created_at=notification.created_at,
    )


@router.get("", response_model=ApiResponse[list[NotificationItem]])
async def list_notifications(
    unread_only: bool = Query(False),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[NotificationItem]]:
    """Latest 50 notifications for the current user."""
    service = NotificationService(session)
    notifications = await service.list_for_user(user.user_id, unread_only=unread_only)
    return ApiResponse(data=[_notification_item(item) for item in notifications])


@router.get("/unread-count", response_model=ApiResponse[UnreadCount])
async def unread_count(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[UnreadCount]:
    service = NotificationService(session)
    return ApiResponse(data=UnreadCount(count=await service.unread_count(user.user_id)))


@router.put("/read-all", response_model=ApiResponse[MarkAllReadResult])
async def mark_all_read(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[MarkAllReadResult]:
    service = NotificationService(session)
    updated = await service.mark_all_as_read(user.user_id)
    return ApiResponse(
        data=MarkAllReadResult(updated=updated), message="All notifications marked as read"
    )


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationItem])
async def mark_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[NotificationItem]:
    service = NotificationService(session)
    try:
        notification = await service.mark_as_read(notification_id, user.user_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ApiResponse(
        data=_notification_item(notification), message="Notification marked as read"
    )
