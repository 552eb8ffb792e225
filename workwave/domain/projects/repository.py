"""Project repository - Database operations for projects"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import Bid, Contract, Invoice, Payment, Project, ProjectStatus, Rating


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_by_id(db: Session, project_id: int) -> Optional[Project]:
        return (
            db.query(Project)
            .options(selectinload(Project.bids).selectinload(Bid.freelancer))
            .filter(Project.id == project_id)
            .first()
        )

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> list[Project]:
        """Projects the user owns or has bid on"""
        return (
            db.query(Project)
            .filter(
                or_(
                    Project.client_id == user_id,
                    Project.bids.any(Bid.freelancer_id == user_id),
                )
            )
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    @staticmethod
    def get_open(db: Session) -> list[Project]:
        return (
            db.query(Project)
            .filter(Project.status == ProjectStatus.OPEN.value)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, **project_data) -> Project:
        project = Project(**project_data)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def update(db: Session, project: Project, **updates) -> Project:
        """Update a project with provided fields"""
        for key, value in updates.items():
            if hasattr(project, key):
                setattr(project, key, value)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_with_contracts(db: Session, project: Project) -> None:
        """Delete a project together with its contracts and everything hanging off them"""
        for contract in list(project.contracts):
            db.query(Payment).filter(Payment.contract_id == contract.id).delete(
                synchronize_session=False
            )
            db.query(Invoice).filter(Invoice.contract_id == contract.id).delete(
                synchronize_session=False
            )
            db.query(Rating).filter(Rating.contract_id == contract.id).delete(
                synchronize_session=False
            )
            db.delete(contract)
        db.flush()
        db.expire(project)
        db.delete(project)
        db.commit()

    @staticmethod
    def has_active_contract(db: Session, project_id: int, stages: list[str]) -> bool:
        return (
            db.query(Contract)
            .filter(Contract.project_id == project_id, Contract.stage.in_(stages))
            .first()
            is not None
        )
