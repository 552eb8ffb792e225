"""Notification domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationUpdate(BaseModel):
    isRead: bool


class NotificationResponse(BaseModel):
    id: int
    userId: int
    type: str
    title: str
    message: str
    referenceId: Optional[int] = None
    referenceType: Optional[str] = None
    amount: Optional[float] = None
    isRead: bool
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def notification_response(notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        userId=notification.user_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        referenceId=notification.reference_id,
        referenceType=notification.reference_type,
        amount=notification.amount,
        isRead=notification.is_read,
        createdAt=notification.created_at,
    )
