"""Payment service - payment intents, provider confirmations and escrow release"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import PAYMENT_CURRENCY
from ...errors import ConflictError, ForbiddenError, NotFoundError
from ...models import (
    Contract,
    Milestone,
    MilestoneStatus,
    NotificationType,
    Payment,
    PaymentStatus,
)
from ...utils.money import to_minor_units
from ..contracts.repository import CLOSED_STAGES, ContractRepository
from ..invoices.pdf_service import generate_receipt_pdf
from ..notifications.service import NotificationService
from .provider import PaymentProvider
from .repository import PaymentRepository

logger = logging.getLogger(__name__)

RELEASABLE_STATUSES = {MilestoneStatus.COMPLETED.value, MilestoneStatus.PAYMENT_REQUESTED.value}


class PaymentService:
    """Service layer for payment business logic"""

    def __init__(self, db: Session, provider: Optional[PaymentProvider] = None):
        self.db = db
        self.repo = PaymentRepository()
        self.contracts = ContractRepository()
        self.notifications = NotificationService(db)
        self.provider = provider

    def list_payments(self, actor: Actor, status: Optional[str] = None) -> list[Payment]:
        return self.repo.get_for_user(self.db, actor.id, status)

    def get_payment(self, payment_id: int, actor: Actor) -> Payment:
        """Payment visible to its payer and payee"""
        payment = self.repo.get_by_id(self.db, payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        if actor.id not in (payment.client_id, payment.freelancer_id):
            raise ForbiddenError("You are not authorized to view this payment")
        return payment

    # ========================================================================
    # PAYMENT INTENTS
    # ========================================================================

    def create_payment_intent(
        self, milestone_id: int, actor: Actor, amount: Optional[float] = None
    ) -> dict:
        """
        Start an in-page card payment for the milestone's open payment request.

        Args:
            milestone_id: milestone whose PENDING/PROCESSING payment is charged
            actor: must be the contract's client
            amount: decimal amount to charge; defaults to the payment amount

        Returns:
            dict with clientSecret, paymentId and the payment page url
        """
        payment = self.repo.get_active_for_milestone(self.db, milestone_id)
        if not payment:
            raise NotFoundError("Payment not found for this milestone")
        if actor.id != payment.client_id:
            raise ForbiddenError("Only the client can pay for this milestone")

        charge = amount if amount is not None else payment.amount
        intent = self.provider.create_payment_intent(
            amount_minor=to_minor_units(charge),
            currency=payment.currency,
            metadata={
                "paymentId": str(payment.id),
                "contractId": str(payment.contract_id),
                "milestoneId": str(payment.milestone_id),
            },
        )

        payment.payment_intent_id = intent.id
        payment.status = PaymentStatus.PROCESSING.value
        self.db.commit()

        logger.info(f"💳 Payment intent {intent.id} created for payment {payment.id}")
        return {
            "clientSecret": intent.client_secret,
            "paymentId": payment.id,
            "url": f"/payment/{payment.id}?client_secret={intent.client_secret}",
        }

    # ========================================================================
    # PROVIDER CONFIRMATION
    # ========================================================================

    def _find_payment(self, intent_id: Optional[str], metadata: dict) -> Optional[Payment]:
        """Look a payment up by intent id, then metadata paymentId, then metadata milestoneId"""
        payment = None
        if intent_id:
            payment = self.repo.get_by_intent_id(self.db, intent_id)

        if not payment and metadata.get("paymentId"):
            try:
                payment = self.repo.get_by_id(self.db, int(metadata["paymentId"]))
            except ValueError:
                logger.warning(f"⚠️ Non-numeric paymentId in metadata: {metadata['paymentId']}")

        if not payment and metadata.get("milestoneId"):
            try:
                milestone_id = int(metadata["milestoneId"])
            except ValueError:
                logger.warning(f"⚠️ Non-numeric milestoneId in metadata: {metadata['milestoneId']}")
            else:
                payment = self.repo.get_active_for_milestone(self.db, milestone_id)

        return payment

    def mark_processing(self, intent_id: str, metadata: dict) -> Optional[Payment]:
        payment = self._find_payment(intent_id, metadata)
        if not payment:
            logger.info(f"ℹ️ No payment for processing intent {intent_id}")
            return None
        if payment.status == PaymentStatus.PENDING.value:
            payment.status = PaymentStatus.PROCESSING.value
            if not payment.payment_intent_id:
                payment.payment_intent_id = intent_id
            self.db.commit()
        return payment

    def confirm_payment(
        self,
        intent_id: Optional[str],
        metadata: dict,
        checkout_session_id: Optional[str] = None,
    ) -> Payment:
        """
        Provider says the money arrived: payment COMPLETED, a PAYMENT_REQUESTED milestone
        becomes PAID, the freelancer is notified. Repeated deliveries are no-ops.
        """
        payment = None
        if checkout_session_id:
            payment = self.repo.get_by_checkout_session_id(self.db, checkout_session_id)
        if not payment:
            payment = self._find_payment(intent_id, metadata)
        if not payment:
            logger.error(f"❌ Payment not found for intent {intent_id} (metadata={metadata})")
            raise NotFoundError("Payment not found")

        if payment.status == PaymentStatus.COMPLETED.value:
            logger.info(f"ℹ️ Payment {payment.id} already completed, ignoring duplicate event")
            return payment

        payment.status = PaymentStatus.COMPLETED.value
        payment.completed_at = datetime.utcnow()
        if intent_id and not payment.payment_intent_id:
            payment.payment_intent_id = intent_id

        milestone: Milestone = payment.milestone
        if milestone.status == MilestoneStatus.PAYMENT_REQUESTED.value:
            milestone.status = MilestoneStatus.PAID.value
            self._complete_if_fully_paid(milestone.contract)

        self.notifications.notify(
            payment.freelancer_id,
            NotificationType.PAYMENT_RECEIVED,
            "Payment Received",
            f"You have received payment of {payment.amount:.2f} {payment.currency.upper()} "
            f"for milestone \"{milestone.title}\"",
            reference_id=payment.id,
            reference_type="PAYMENT",
            amount=payment.amount,
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Payment {payment.id} completed; milestone {milestone.id} is {milestone.status}")
        return payment

    def is_escrow_intent(self, intent_id: str) -> bool:
        return self.contracts.get_by_payment_intent_id(self.db, intent_id) is not None

    def _complete_if_fully_paid(self, contract: Contract) -> None:
        """
        Paying the last unpaid milestone closes the contract.

        Staged in the caller's transaction, so the contract, its project and the
        payment that finished them are committed together.
        """
        if contract.stage in CLOSED_STAGES:
            return
        if any(m.status != MilestoneStatus.PAID.value for m in contract.milestones):
            return

        self.contracts.stage_completion(contract)
        self.notifications.notify_contract_completed(contract)
        logger.info(f"🏁 Every milestone of contract {contract.id} is paid; contract completed")

    # ========================================================================
    # ESCROW RELEASE
    # ========================================================================

    def release_escrow(self, contract_id: int, milestone_id: int, actor: Actor) -> Milestone:
        """Client releases a finished milestone's share of the escrow to the freelancer"""
        contract = self.contracts.get_by_id(self.db, contract_id)
        if not contract:
            raise NotFoundError("Contract not found")
        if actor.id != contract.client_id:
            raise ForbiddenError("Only the contract's client can release escrow")

        milestone = next((m for m in contract.milestones if m.id == milestone_id), None)
        if not milestone:
            raise NotFoundError("Milestone not found")

        if not contract.payment_intent_id:
            raise ConflictError("Contract has no escrow payment")
        if not contract.freelancer.stripe_account_id:
            raise ConflictError("Freelancer has no payout account")
        if milestone.status not in RELEASABLE_STATUSES:
            raise ConflictError(f"Cannot release payment for a {milestone.status} milestone")

        transfer_id = self.provider.create_transfer(
            amount_minor=to_minor_units(milestone.amount),
            currency=PAYMENT_CURRENCY,
            destination=contract.freelancer.stripe_account_id,
            source_payment_intent_id=contract.payment_intent_id,
            metadata={"contractId": str(contract.id), "milestoneId": str(milestone.id)},
        )

        milestone.status = MilestoneStatus.PAID.value
        self._complete_if_fully_paid(contract)
        self.notifications.notify(
            contract.freelancer_id,
            NotificationType.PAYMENT_RECEIVED,
            "Payment Released",
            f"Payment of {milestone.amount:.2f} for milestone \"{milestone.title}\" was released",
            reference_id=milestone.id,
            reference_type="MILESTONE",
            amount=milestone.amount,
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(milestone)

        logger.info(f"💸 Escrow transfer {transfer_id} released milestone {milestone.id}")
        return milestone

    # ========================================================================
    # RECEIPTS
    # ========================================================================

    def download_receipt(self, payment_id: int, actor: Actor) -> tuple[str, bytes]:
        """Returns (filename, pdf bytes) of the payment receipt"""
        payment = self.get_payment(payment_id, actor)
        return f"receipt-{payment.id}.pdf", generate_receipt_pdf(payment)
