"""Notification repository - Database operations for notifications"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Notification

RECENT_LIMIT = 50


class NotificationRepository:
    """Repository for notification database operations"""

    @staticmethod
    def add_notification(db: Session, **data) -> Notification:
        """Stage a notification in the caller's transaction (no commit)"""
        notification = Notification(**data)
        db.add(notification)
        return notification

    @staticmethod
    def get_recent(db: Session, user_id: int, limit: int = RECENT_LIMIT) -> list[Notification]:
        """Latest notifications for a user, newest first"""
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, notification_id: int) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.id == notification_id).first()

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        """Mark every unread notification of a user as read"""
        count = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def delete(db: Session, notification: Notification) -> None:
        db.delete(notification)
        db.commit()
