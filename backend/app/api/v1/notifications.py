"""Notification API endpoints."""

from fastapi import APIRouter, HTTPException

from app.api.v1.dependencies import CurrentUser, NotificationServiceDep
from app.api.v1.schemas import MarkReadResponse, NotificationListResponse, NotificationResponse
from app.models.notification import NotificationBulkRead, NotificationReadUpdate
from app.services.notifications.exceptions import NotificationNotFound

router = APIRouter(tags=["notifications"])


@router.get("/notifications", response_model=NotificationListResponse, operation_id="listNotifications")
async def list_notifications(
    user: CurrentUser,
    service: NotificationServiceDep,
    unread_only: bool = False,
    limit: int = 50,
) -> NotificationListResponse:
    """List the current user's notifications, newest first."""
    notifications = await service.list_for_user(user.id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(notifications=[NotificationResponse.from_model(n) for n in notifications])


@router.put("/notifications", response_model=MarkReadResponse, operation_id="markNotificationsRead")
async def mark_notifications_read(
    payload: NotificationBulkRead, user: CurrentUser, service: NotificationServiceDep
) -> MarkReadResponse:
    """Mark the given notifications read, or all of them with ``mark_all_read``."""
    if payload.mark_all_read:
        updated = await service.mark_read(user.id)
    elif payload.ids:
        updated = await service.mark_read(user.id, payload.ids)
    else:
        raise HTTPException(status_code=422, detail="Provide ids or mark_all_read")
    return MarkReadResponse(updated=updated)


@router.put(
    "/notifications/{notification_id}", response_model=NotificationResponse, operation_id="updateNotification"
)
async def update_notification(
    notification_id: str, payload: NotificationReadUpdate, user: CurrentUser, service: NotificationServiceDep
) -> NotificationResponse:
    try:
        notification = await service.set_read(notification_id, user.id, read=payload.read)
    except NotificationNotFound:
        raise HTTPException(status_code=404, detail="Notification not found")
    return NotificationResponse.from_model(notification)
