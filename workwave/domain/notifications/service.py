"""Notification service - in-app notifications written by the lifecycle services"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...errors import ForbiddenError, NotFoundError
from ...models import Notification, NotificationType
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service layer for notification business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def notify(
        self,
        user_id: int,
        notification_type: NotificationType,
        title: str,
        message: str,
        reference_id: Optional[int] = None,
        reference_type: Optional[str] = None,
        amount: Optional[float] = None,
    ) -> Notification:
        """
        Stage a notification for a user.

        The caller owns the transaction: the notification is committed together with
        the lifecycle change that produced it.
        """
        logger.debug(f"🔔 {notification_type.value} notification for user {user_id}")
        return self.repo.add_notification(
            self.db,
            user_id=user_id,
            type=notification_type.value,
            title=title,
            message=message,
            reference_id=reference_id,
            reference_type=reference_type,
            amount=amount,
        )

    def notify_contract_completed(self, contract) -> None:
        for user_id in (contract.client_id, contract.freelancer_id):
            self.notify(
                user_id,
                NotificationType.CONTRACT_COMPLETED,
                "Contract Completed",
                f"Contract \"{contract.title}\" has been completed successfully",
                reference_id=contract.id,
                reference_type="CONTRACT",
            )

    def list_notifications(self, actor: Actor) -> list[Notification]:
        return self.repo.get_recent(self.db, actor.id)

    def _get_owned(self, notification_id: int, actor: Actor) -> Notification:
        notification = self.repo.get_by_id(self.db, notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.user_id != actor.id:
            raise ForbiddenError("Not authorized")
        return notification

    def mark_read(self, notification_id: int, actor: Actor, is_read: bool) -> Notification:
        notification = self._get_owned(notification_id, actor)
        notification.is_read = is_read
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, actor: Actor) -> int:
        count = self.repo.mark_all_read(self.db, actor.id)
        logger.info(f"✅ Marked {count} notification(s) read for user {actor.id}")
        return count

    def delete_notification(self, notification_id: int, actor: Actor) -> None:
        notification = self._get_owned(notification_id, actor)
        self.repo.delete(self.db, notification)
