"""Contract repository - Database operations for contracts"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Bid, Contract, ContractStage, Milestone, ProjectStatus

CLOSED_STAGES = {ContractStage.COMPLETED.value, ContractStage.CANCELLED.value}


def _with_aggregate(query):
    """Eager-load the parties, project and milestones with their payments"""
    return query.options(
        joinedload(Contract.client),
        joinedload(Contract.freelancer),
        joinedload(Contract.project),
        selectinload(Contract.milestones).selectinload(Milestone.payments),
    )


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_by_id(db: Session, contract_id: int) -> Optional[Contract]:
        return _with_aggregate(db.query(Contract)).filter(Contract.id == contract_id).first()

    @staticmethod
    def get_for_user(
        db: Session,
        user_id: int,
        project_id: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> list[Contract]:
        """Contracts where the user is a party, most recently updated first"""
        query = _with_aggregate(db.query(Contract)).filter(
            or_(Contract.client_id == user_id, Contract.freelancer_id == user_id)
        )
        if project_id:
            query = query.filter(Contract.project_id == project_id)
        if stage:
            query = query.filter(Contract.stage == stage)
        return query.order_by(Contract.updated_at.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_for_client(db: Session, client_id: int) -> list[Contract]:
        return (
            _with_aggregate(db.query(Contract))
            .filter(Contract.client_id == client_id)
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .all()
        )

    @staticmethod
    def get_bid(db: Session, bid_id: int) -> Optional[Bid]:
        return (
            db.query(Bid)
            .options(joinedload(Bid.project), joinedload(Bid.freelancer))
            .filter(Bid.id == bid_id)
            .first()
        )

    @staticmethod
    def get_by_bid_id(db: Session, bid_id: int) -> Optional[Contract]:
        return db.query(Contract).filter(Contract.bid_id == bid_id).first()

    @staticmethod
    def add_contract(db: Session, milestones: list[dict], **contract_data) -> Contract:
        """Stage a contract and its milestones (no commit)"""
        contract = Contract(**contract_data)
        contract.milestones = [Milestone(**m) for m in milestones]
        db.add(contract)
        db.flush()
        return contract

    @staticmethod
    def get_by_payment_intent_id(db: Session, payment_intent_id: str) -> Optional[Contract]:
        return db.query(Contract).filter(Contract.payment_intent_id == payment_intent_id).first()

    @staticmethod
    def stage_completion(contract: Contract) -> None:
        """Stage the contract and its project as COMPLETED (no commit)"""
        contract.stage = ContractStage.COMPLETED.value
        contract.end_date = datetime.utcnow()
        contract.project.status = ProjectStatus.COMPLETED.value
