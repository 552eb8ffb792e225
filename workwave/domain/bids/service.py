"""Bid service - bid submission gated on the project being OPEN"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...models import Bid, BidStatus, NotificationType, ProjectStatus
from ...utils.sanitization import sanitize_string
from ..notifications.service import NotificationService
from .repository import SORTABLE_COLUMNS, BidRepository
from .schemas import BidCreate

logger = logging.getLogger(__name__)


class BidService:
    """Service layer for bid business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BidRepository()
        self.notifications = NotificationService(db)

    def create_bid(self, data: BidCreate, actor: Actor) -> Bid:
        """
        Submit a bid on a project.

        Raises:
            ForbiddenError: caller is not a freelancer
            ValidationError: a required field is missing or not positive
            NotFoundError: project does not exist
            ConflictError: project is not OPEN
        """
        if not actor.is_freelancer:
            raise ForbiddenError("Only freelancers can submit bids")

        if (
            not data.projectId
            or not data.amount
            or not data.deliveryTime
            or not data.coverLetter
            or not data.coverLetter.strip()
        ):
            raise ValidationError("Missing required fields")
        if data.amount < 0 or data.deliveryTime < 0:
            raise ValidationError("Amount and delivery time must be positive")

        project = self.repo.get_project(self.db, data.projectId)
        if not project:
            raise NotFoundError("Project not found")

        if project.status != ProjectStatus.OPEN.value:
            logger.info(f"⚠️ Bid rejected: project {project.id} is {project.status}")
            raise ConflictError("Project is not open for bids")

        bid = self.repo.create(
            self.db,
            project_id=project.id,
            freelancer_id=actor.id,
            amount=data.amount,
            delivery_time=data.deliveryTime,
            cover_letter=sanitize_string(data.coverLetter),
            status=BidStatus.PENDING.value,
        )
        self.notifications.notify(
            project.client_id,
            NotificationType.BID_RECEIVED,
            "New bid received",
            f"{actor.name} bid {data.amount:.2f} on \"{project.title}\"",
            reference_id=project.id,
            reference_type="PROJECT",
            amount=data.amount,
        )
        self.db.commit()
        self.db.refresh(bid)

        logger.info(f"✅ Bid {bid.id} placed on project {project.id} by freelancer {actor.id}")
        return bid

    def update_bid_status(self, bid_id: int, status: BidStatus, actor: Actor) -> Bid:
        """Owner of the bid's project accepts or rejects it; contracts are created separately"""
        bid = self.repo.get_by_id(self.db, bid_id)
        if not bid:
            raise NotFoundError("Bid not found")
        if bid.project.client_id != actor.id:
            raise ForbiddenError("You can only update bids on your own projects")

        bid.status = status.value
        self.notifications.notify(
            bid.freelancer_id,
            NotificationType.BID_UPDATED,
            f"Bid {status.value.lower()}",
            f"Your bid on \"{bid.project.title}\" was {status.value.lower()}",
            reference_id=bid.id,
            reference_type="BID",
        )
        self.db.commit()
        self.db.refresh(bid)
        logger.info(f"📝 Bid {bid.id} set to {bid.status} by client {actor.id}")
        return bid

    def list_client_bids(
        self,
        actor: Actor,
        status: Optional[str] = None,
        project_id: Optional[int] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> list[Bid]:
        if not actor.is_client:
            raise ForbiddenError("Only clients can view received bids")
        if sort_by not in SORTABLE_COLUMNS:
            raise ValidationError(f"Cannot sort by {sort_by}")
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sortOrder must be asc or desc")
        return self.repo.get_for_client(self.db, actor.id, status, project_id, sort_by, sort_order)

    def list_freelancer_bids(self, actor: Actor) -> list[Bid]:
        if not actor.is_freelancer:
            raise ForbiddenError("Only freelancers have submitted bids")
        return self.repo.get_for_freelancer(self.db, actor.id)
