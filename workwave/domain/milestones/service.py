"""Milestone service - per-deliverable status lifecycle and payment requests"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import APP_URL, PAYMENT_CURRENCY
from ...errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...models import Contract, Milestone, MilestoneProgress, MilestoneStatus, NotificationType
from ...utils.money import to_minor_units
from ...utils.sanitization import sanitize_string
from ..notifications.service import NotificationService
from ..payments.provider import PaymentProvider
from ..payments.repository import PaymentRepository
from .repository import MilestoneRepository
from .schemas import MilestoneUpdate

logger = logging.getLogger(__name__)

FREELANCER = "freelancer"
PARTY = "party"

# target status -> (who may set it, statuses it may be reached from)
TRANSITIONS = {
    MilestoneStatus.IN_PROGRESS: (FREELANCER, {MilestoneStatus.PENDING}),
    MilestoneStatus.COMPLETED: (FREELANCER, {MilestoneStatus.IN_PROGRESS}),
    MilestoneStatus.PAYMENT_REQUESTED: (FREELANCER, {MilestoneStatus.COMPLETED}),
    MilestoneStatus.CANCELLED: (
        PARTY,
        {
            MilestoneStatus.PENDING,
            MilestoneStatus.IN_PROGRESS,
            MilestoneStatus.COMPLETED,
            MilestoneStatus.PAYMENT_REQUESTED,
        },
    ),
}

CLIENT_DASHBOARD_PATH = "/client/dashboard"


class MilestoneService:
    """Service layer for milestone business logic"""

    def __init__(self, db: Session, provider: Optional[PaymentProvider] = None):
        self.db = db
        self.repo = MilestoneRepository()
        self.payments = PaymentRepository()
        self.notifications = NotificationService(db)
        self.provider = provider

    def get_milestone(self, milestone_id: int, actor: Actor) -> Milestone:
        """Milestone visible to either party of its contract"""
        milestone = self.repo.get_by_id(self.db, milestone_id)
        if not milestone:
            raise NotFoundError("Milestone not found")
        if actor.id not in (milestone.contract.client_id, milestone.contract.freelancer_id):
            raise ForbiddenError("You are not authorized to access this milestone")
        return milestone

    # ========================================================================
    # STATUS TRANSITIONS
    # ========================================================================

    def _parse_status(self, status: str) -> MilestoneStatus:
        try:
            target = MilestoneStatus(status)
        except ValueError:
            raise ValidationError("Invalid milestone status") from None
        if target not in TRANSITIONS:
            raise ValidationError(f"Milestone status cannot be set to {target.value}")
        return target

    def _check_not_paid(self, milestone: Milestone) -> None:
        """A milestone the client already paid for never gets a second payment"""
        if self.payments.get_completed_for_milestone(self.db, milestone.id):
            raise ConflictError("Milestone has already been paid")

    def _apply_status(self, milestone: Milestone, actor: Actor, target: MilestoneStatus) -> None:
        """
        Validate and stage a status change, plus its payment record and notification.

        The caller commits. PAID is never set here; it follows provider confirmation
        or an escrow release.
        """
        contract: Contract = milestone.contract
        allowed_actor, sources = TRANSITIONS[target]

        if allowed_actor == FREELANCER and actor.id != contract.freelancer_id:
            raise ForbiddenError(f"Only the freelancer can set a milestone to {target.value}")

        current = MilestoneStatus(milestone.status)
        if current not in sources:
            raise ConflictError(f"Cannot change milestone from {current.value} to {target.value}")
        if target == MilestoneStatus.PAYMENT_REQUESTED:
            self._check_not_paid(milestone)

        milestone.status = target.value
        counterpart_id = (
            contract.client_id if actor.id == contract.freelancer_id else contract.freelancer_id
        )

        if target == MilestoneStatus.PAYMENT_REQUESTED:
            payment = self.payments.get_active_for_milestone(self.db, milestone.id)
            if not payment:
                payment = self.payments.add_payment(self.db, milestone, contract, PAYMENT_CURRENCY)
            self.notifications.notify(
                contract.client_id,
                NotificationType.PAYMENT_REQUESTED,
                "Payment Request",
                f"{actor.name} has requested payment of {milestone.amount:.2f} "
                f"for milestone: {milestone.title}",
                reference_id=payment.id,
                reference_type="PAYMENT",
                amount=milestone.amount,
            )
        elif target == MilestoneStatus.COMPLETED:
            self.notifications.notify(
                counterpart_id,
                NotificationType.MILESTONE_COMPLETED,
                "Milestone Completed",
                f"{actor.name} has marked milestone as completed: {milestone.title}",
                reference_id=milestone.id,
                reference_type="MILESTONE",
            )
        else:
            label = target.value.lower().replace("_", " ")
            self.notifications.notify(
                counterpart_id,
                NotificationType.MILESTONE_UPDATED,
                "Milestone Update",
                f"Milestone \"{milestone.title}\" is now {label}",
                reference_id=milestone.id,
                reference_type="MILESTONE",
            )

        logger.info(
            f"📝 Milestone {milestone.id}: {current.value} -> {target.value} by user {actor.id}"
        )

    def update_status(self, milestone_id: int, actor: Actor, status: str) -> Milestone:
        target = self._parse_status(status)
        milestone = self.get_milestone(milestone_id, actor)
        self._apply_status(milestone, actor, target)
        self.db.commit()
        self.db.refresh(milestone)
        return milestone

    def update_details(self, milestone_id: int, actor: Actor, data: MilestoneUpdate) -> Milestone:
        """Client edits title, description, amount or due date while the milestone is PENDING"""
        milestone = self.get_milestone(milestone_id, actor)
        if actor.id != milestone.contract.client_id:
            raise ForbiddenError("Only the client can update milestone details")
        if milestone.status != MilestoneStatus.PENDING.value:
            raise ConflictError(
                "Cannot update details of a milestone that is already in progress or completed"
            )

        updates = {}
        if data.title is not None:
            updates["title"] = sanitize_string(data.title)
        if data.description is not None:
            updates["description"] = sanitize_string(data.description)
        if data.amount is not None:
            updates["amount"] = data.amount
        if "dueDate" in data.model_fields_set:
            updates["due_date"] = data.dueDate

        return self.repo.update(self.db, milestone, **updates)

    def update_milestone(self, milestone_id: int, actor: Actor, data: MilestoneUpdate) -> Milestone:
        if data.status is not None:
            return self.update_status(milestone_id, actor, data.status)
        return self.update_details(milestone_id, actor, data)

    # ========================================================================
    # PROGRESS LOG
    # ========================================================================

    def add_progress(
        self, milestone_id: int, actor: Actor, description: str, status: Optional[str] = None
    ) -> Milestone:
        """Record a progress note; an included status goes through the normal transition rules"""
        target = self._parse_status(status) if status else None
        milestone = self.get_milestone(milestone_id, actor)

        if target and target.value != milestone.status:
            self._apply_status(milestone, actor, target)

        self.repo.add_progress(
            self.db, milestone, actor.id, sanitize_string(description), milestone.status
        )
        self.db.commit()

        # Reload so the progress log comes back newest first
        self.db.expire(milestone)
        return self.repo.get_by_id(self.db, milestone.id)

    def list_progress(self, milestone_id: int, actor: Actor) -> list[MilestoneProgress]:
        milestone = self.get_milestone(milestone_id, actor)
        return self.repo.get_progress(self.db, milestone.id)

    # ========================================================================
    # PAYMENT REQUEST (hosted checkout)
    # ========================================================================

    def request_payment(self, milestone_id: int, actor: Actor) -> dict:
        """
        Open a hosted checkout for the milestone amount.

        The client pays the milestone; the PENDING payment record (amount equal to the
        milestone amount) is reused when one is already open. Returns the checkout url
        and the dashboard path to come back to.
        """
        milestone = self.repo.get_by_id(self.db, milestone_id)
        if not milestone:
            raise NotFoundError("Milestone not found")

        contract = milestone.contract
        if actor.id != contract.client_id:
            raise ForbiddenError("Only the client can pay for a milestone")

        if milestone.status in (MilestoneStatus.PAID.value, MilestoneStatus.CANCELLED.value):
            raise ConflictError(f"Cannot request payment for a {milestone.status} milestone")
        self._check_not_paid(milestone)

        payment = self.payments.get_active_for_milestone(self.db, milestone.id)
        if not payment:
            payment = self.payments.add_payment(self.db, milestone, contract, PAYMENT_CURRENCY)

        try:
            session = self.provider.create_checkout_session(
                amount_minor=to_minor_units(milestone.amount),
                currency=payment.currency,
                name=milestone.title,
                description=milestone.description,
                success_url=f"{APP_URL}{CLIENT_DASHBOARD_PATH}?success=true",
                cancel_url=f"{APP_URL}{CLIENT_DASHBOARD_PATH}?canceled=true",
                metadata={
                    "paymentId": str(payment.id),
                    "milestoneId": str(milestone.id),
                    "contractId": str(contract.id),
                },
            )
        except Exception:
            self.db.rollback()
            raise

        payment.checkout_session_id = session.id
        if session.payment_intent_id:
            payment.payment_intent_id = session.payment_intent_id
        self.db.commit()

        logger.info(f"💳 Checkout opened for milestone {milestone.id} (payment {payment.id})")
        return {"url": session.url, "redirectUrl": CLIENT_DASHBOARD_PATH}
