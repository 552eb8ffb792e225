"""Bid repository - Database operations for bids"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Bid, Project

SORTABLE_COLUMNS = {
    "createdAt": Bid.created_at,
    "amount": Bid.amount,
    "deliveryTime": Bid.delivery_time,
    "status": Bid.status,
}


class BidRepository:
    """Repository for bid database operations"""

    @staticmethod
    def get_by_id(db: Session, bid_id: int) -> Optional[Bid]:
        return (
            db.query(Bid)
            .options(joinedload(Bid.project), joinedload(Bid.freelancer))
            .filter(Bid.id == bid_id)
            .first()
        )

    @staticmethod
    def get_project(db: Session, project_id: int) -> Optional[Project]:
        return db.query(Project).filter(Project.id == project_id).first()

    @staticmethod
    def create(db: Session, **bid_data) -> Bid:
        """Stage a bid in the caller's transaction"""
        bid = Bid(**bid_data)
        db.add(bid)
        db.flush()
        return bid

    @staticmethod
    def get_for_client(
        db: Session,
        client_id: int,
        status: Optional[str] = None,
        project_id: Optional[int] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> list[Bid]:
        """Bids on the client's projects with optional filters"""
        query = (
            db.query(Bid)
            .join(Project, Bid.project_id == Project.id)
            .options(joinedload(Bid.project), joinedload(Bid.freelancer))
            .filter(Project.client_id == client_id)
        )
        if status:
            query = query.filter(Bid.status == status)
        if project_id:
            query = query.filter(Bid.project_id == project_id)

        column = SORTABLE_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()
        return query.order_by(ordering, Bid.id.desc()).all()

    @staticmethod
    def get_for_freelancer(db: Session, freelancer_id: int) -> list[Bid]:
        return (
            db.query(Bid)
            .options(joinedload(Bid.project))
            .filter(Bid.freelancer_id == freelancer_id)
            .order_by(Bid.created_at.desc(), Bid.id.desc())
            .all()
        )
