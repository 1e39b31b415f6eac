# backend/app/api/v1/notifications.py
from fastapi import APIRouter, Depends
from typing import List

from app.api.dependencies import get_current_user, get_notification_service
from app.db.models.user import User
from app.schemas.notification import Notification
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get("/notifications", response_model=List[Notification])
async def list_notifications(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Notifications of the current user, newest first"""
    return await service.list_for_merchant(current_user.id, unread_only, skip, limit)


@router.post("/notifications/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark a notification as read"""
    return await service.mark_read(notification_id, current_user.id)
