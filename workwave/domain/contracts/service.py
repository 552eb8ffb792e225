"""Contract service - contract creation, stage lifecycle, completion and escrow"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import PAYMENT_CURRENCY
from ...errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...models import (
    BidStatus,
    Contract,
    ContractStage,
    MilestoneStatus,
    NotificationType,
    ProjectStatus,
)
from ...utils.money import amounts_match, to_minor_units
from ...utils.sanitization import sanitize_string
from ..notifications.service import NotificationService
from ..payments.provider import PaymentProvider
from .repository import CLOSED_STAGES, ContractRepository
from .schemas import ContractCreate

logger = logging.getLogger(__name__)

# Stages a party may set through advance_stage; CANCELLED only follows a refund
ADVANCEABLE_STAGES = {
    ContractStage.APPROVAL.value,
    ContractStage.PAYMENT.value,
    ContractStage.REVIEW.value,
    ContractStage.COMPLETED.value,
}


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session, provider: Optional[PaymentProvider] = None):
        self.db = db
        self.repo = ContractRepository()
        self.notifications = NotificationService(db)
        self.provider = provider

    # ========================================================================
    # QUERIES
    # ========================================================================

    def _get(self, contract_id: int) -> Contract:
        contract = self.repo.get_by_id(self.db, contract_id)
        if not contract:
            raise NotFoundError("Contract not found")
        return contract

    def _get_for_party(self, contract_id: int, actor: Actor) -> Contract:
        contract = self._get(contract_id)
        if actor.id not in (contract.client_id, contract.freelancer_id):
            raise ForbiddenError("Only the contract's client or freelancer can do this")
        return contract

    def _get_for_client(self, contract_id: int, actor: Actor) -> Contract:
        contract = self._get(contract_id)
        if actor.id != contract.client_id:
            raise ForbiddenError("Only the contract's client can do this")
        return contract

    def get_contract(self, contract_id: int, actor: Actor) -> Contract:
        return self._get_for_party(contract_id, actor)

    def list_contracts(
        self, actor: Actor, project_id: Optional[int] = None, stage: Optional[str] = None
    ) -> list[Contract]:
        return self.repo.get_for_user(self.db, actor.id, project_id, stage)

    def list_client_contracts(self, actor: Actor) -> list[Contract]:
        """Client dashboard view: contracts with milestones and their payments"""
        if not actor.is_client:
            raise ForbiddenError("Only clients can view client contracts")
        return self.repo.get_for_client(self.db, actor.id)

    # ========================================================================
    # CREATION
    # ========================================================================

    def create_contract(self, data: ContractCreate, actor: Actor) -> Contract:
        """
        Turn a bid into a contract with its milestones.

        Contract (APPROVAL) and milestones (PENDING) are written together with the bid
        becoming ACCEPTED and the project IN_PROGRESS, in one transaction. Other bids on
        the project keep their status.
        """
        if not actor.is_client:
            raise ForbiddenError("Only clients can create contracts")

        bid = self.repo.get_bid(self.db, data.bidId)
        if not bid:
            raise NotFoundError("Bid not found")

        project = bid.project
        if project.client_id != actor.id:
            raise ForbiddenError("You can only create contracts for your own projects")

        if self.repo.get_by_bid_id(self.db, bid.id):
            raise ConflictError("A contract already exists for this bid")

        if bid.status == BidStatus.REJECTED.value:
            raise ConflictError("Cannot create a contract from a rejected bid")
        if project.status in (ProjectStatus.COMPLETED.value, ProjectStatus.CANCELLED.value):
            raise ConflictError(f"Project is {project.status.lower()}")

        milestone_total = sum(m.amount for m in data.milestones)
        if not amounts_match(milestone_total, data.amount):
            raise ValidationError(
                "The sum of milestone amounts must equal the total contract amount"
            )

        try:
            contract = self.repo.add_contract(
                self.db,
                milestones=[
                    {
                        "title": sanitize_string(m.title),
                        "description": sanitize_string(m.description),
                        "amount": m.amount,
                        "due_date": m.dueDate,
                        "status": MilestoneStatus.PENDING.value,
                    }
                    for m in data.milestones
                ],
                project_id=project.id,
                bid_id=bid.id,
                client_id=actor.id,
                freelancer_id=bid.freelancer_id,
                title=project.title,
                terms=sanitize_string(data.terms),
                amount=data.amount,
                stage=ContractStage.APPROVAL.value,
                terms_accepted=False,
            )
            bid.status = BidStatus.ACCEPTED.value
            project.status = ProjectStatus.IN_PROGRESS.value
            self.notifications.notify(
                bid.freelancer_id,
                NotificationType.CONTRACT_CREATED,
                "Contract Created",
                f"{actor.name} created a contract for \"{project.title}\"",
                reference_id=contract.id,
                reference_type="CONTRACT",
                amount=data.amount,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"✅ Contract {contract.id} created from bid {bid.id} "
            f"with {len(data.milestones)} milestone(s)"
        )
        return self._get(contract.id)

    # ========================================================================
    # TERMS & STAGE
    # ========================================================================

    def update_terms(self, contract_id: int, actor: Actor, terms: str) -> Contract:
        """Client rewrites the terms until either party has accepted them"""
        contract = self._get_for_client(contract_id, actor)
        if contract.stage != ContractStage.APPROVAL.value or contract.terms_accepted:
            raise ConflictError("Cannot update terms for a contract that is already active")

        contract.terms = sanitize_string(terms)
        self.db.commit()
        self.db.refresh(contract)
        return contract

    def accept_terms(self, contract_id: int, actor: Actor) -> Contract:
        contract = self._get_for_party(contract_id, actor)
        contract.terms_accepted = True
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"🤝 Terms of contract {contract.id} accepted by user {actor.id}")
        return contract

    def advance_stage(self, contract_id: int, actor: Actor, stage: Optional[str]) -> Contract:
        """
        Move a contract to another stage.

        Any known stage may be written from any other (last writer wins). COMPLETED is
        delegated to complete() so the milestone check always applies.
        """
        if not stage or stage not in ADVANCEABLE_STAGES:
            raise ValidationError("Invalid contract stage")

        if stage == ContractStage.COMPLETED.value:
            return self.complete(contract_id, actor)

        contract = self._get_for_party(contract_id, actor)
        previous = contract.stage
        contract.stage = stage
        if stage == ContractStage.PAYMENT.value and not contract.start_date:
            contract.start_date = datetime.utcnow()
        self.db.commit()
        self.db.refresh(contract)

        logger.info(f"📝 Contract {contract.id}: {previous} -> {stage} by user {actor.id}")
        return contract

    def complete(self, contract_id: int, actor: Actor) -> Contract:
        """
        Close a contract once every milestone is COMPLETED.

        Contract stage and project status change in one commit; on any failure both
        are rolled back. Both parties are notified afterwards.

        Raises:
            ConflictError: the contract is already closed, or a milestone is not COMPLETED
        """
        contract = self._get_for_party(contract_id, actor)
        if contract.stage in CLOSED_STAGES:
            raise ConflictError(f"Contract is already {contract.stage.lower()}")

        incomplete = [
            m for m in contract.milestones if m.status != MilestoneStatus.COMPLETED.value
        ]
        if incomplete:
            raise ConflictError("All milestones must be completed before ending the contract")

        try:
            self.repo.stage_completion(contract)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"❌ Failed to complete contract {contract_id}; changes rolled back")
            raise

        self.notifications.notify_contract_completed(contract)
        self.db.commit()

        logger.info(f"🏁 Contract {contract.id} and project {contract.project_id} completed")
        self.db.refresh(contract)
        return contract

    # ========================================================================
    # ESCROW
    # ========================================================================

    def create_escrow(self, contract_id: int, actor: Actor) -> str:
        """Hold the full contract amount with the provider; returns the client secret"""
        contract = self._get_for_client(contract_id, actor)
        if contract.stage in CLOSED_STAGES:
            raise ConflictError(f"Contract is {contract.stage.lower()}")

        intent = self.provider.create_payment_intent(
            amount_minor=to_minor_units(contract.amount),
            currency=PAYMENT_CURRENCY,
            metadata={
                "contractId": str(contract.id),
                "freelancerId": str(contract.freelancer_id),
            },
        )
        contract.payment_intent_id = intent.id
        self.db.commit()

        logger.info(f"💰 Escrow {intent.id} opened for contract {contract.id}")
        return intent.client_secret

    def refund_escrow(self, contract_id: int, actor: Actor) -> Contract:
        """Refund the contract's escrow hold and cancel the contract"""
        contract = self._get_for_client(contract_id, actor)
        if not contract.payment_intent_id:
            raise ConflictError("Contract has no escrow payment to refund")
        if contract.stage in CLOSED_STAGES:
            raise ConflictError(f"Contract is {contract.stage.lower()}")

        self.provider.create_refund(contract.payment_intent_id)
        contract.stage = ContractStage.CANCELLED.value
        self.db.commit()
        self.db.refresh(contract)

        logger.info(f"↩️ Escrow for contract {contract.id} refunded; contract cancelled")
        return contract
