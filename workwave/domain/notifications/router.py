"""Notification router - FastAPI endpoints for the notification inbox"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from .schemas import NotificationResponse, NotificationUpdate, notification_response
from .service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency injection for NotificationService"""
    return NotificationService(db)


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
):
    """Latest 50 notifications, newest first"""
    return [notification_response(n) for n in service.list_notifications(actor)]


# Registered before /{notification_id} so the literal path wins
@router.patch("/mark-all-read")
async def mark_all_read(
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
):
    count = service.mark_all_read(actor)
    return {"success": True, "updated": count}


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    notification_id: int,
    data: NotificationUpdate,
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.mark_read(notification_id, actor, data.isRead)
    return notification_response(notification)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
):
    service.delete_notification(notification_id, actor)
    return {"success": True}
