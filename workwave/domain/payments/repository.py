"""Payment repository - Database operations for escrow payments"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Contract, Milestone, Payment, PaymentStatus

ACTIVE_STATUSES = [PaymentStatus.PENDING.value, PaymentStatus.PROCESSING.value]


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_by_id(db: Session, payment_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.milestone).joinedload(Milestone.contract))
            .filter(Payment.id == payment_id)
            .first()
        )

    @staticmethod
    def get_by_intent_id(db: Session, payment_intent_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.payment_intent_id == payment_intent_id).first()

    @staticmethod
    def get_by_checkout_session_id(db: Session, session_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.checkout_session_id == session_id).first()

    @staticmethod
    def get_active_for_milestone(db: Session, milestone_id: int) -> Optional[Payment]:
        """Latest PENDING or PROCESSING payment of a milestone"""
        return (
            db.query(Payment)
            .filter(Payment.milestone_id == milestone_id, Payment.status.in_(ACTIVE_STATUSES))
            .order_by(Payment.id.desc())
            .first()
        )

    @staticmethod
    def get_completed_for_milestone(db: Session, milestone_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(
                Payment.milestone_id == milestone_id,
                Payment.status == PaymentStatus.COMPLETED.value,
            )
            .first()
        )

    @staticmethod
    def get_for_user(db: Session, user_id: int, status: Optional[str] = None) -> list[Payment]:
        """Payments where the user is payer or payee"""
        query = db.query(Payment).filter(
            or_(Payment.client_id == user_id, Payment.freelancer_id == user_id)
        )
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()

    @staticmethod
    def add_payment(db: Session, milestone: Milestone, contract: Contract, currency: str) -> Payment:
        """Stage a PENDING payment for the full milestone amount (no commit)"""
        payment = Payment(
            contract_id=contract.id,
            milestone_id=milestone.id,
            client_id=contract.client_id,
            freelancer_id=contract.freelancer_id,
            amount=milestone.amount,
            currency=currency,
            status=PaymentStatus.PENDING.value,
        )
        db.add(payment)
        db.flush()
        return payment
