"""Rating repository - Database operations for contract ratings"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Contract, Rating, User


class RatingRepository:
    """Repository for rating database operations"""

    @staticmethod
    def get_contract(db: Session, contract_id: int) -> Optional[Contract]:
        return (
            db.query(Contract)
            .options(joinedload(Contract.freelancer))
            .filter(Contract.id == contract_id)
            .first()
        )

    @staticmethod
    def exists(db: Session, contract_id: int, rater_id: int) -> bool:
        return (
            db.query(Rating.id)
            .filter(Rating.contract_id == contract_id, Rating.rater_id == rater_id)
            .first()
            is not None
        )

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> list[Rating]:
        """Ratings received by a user, newest first"""
        return (
            db.query(Rating)
            .options(joinedload(Rating.rater), joinedload(Rating.contract))
            .filter(Rating.rated_user_id == user_id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .all()
        )

    @staticmethod
    def average_for_user(db: Session, user_id: int) -> Optional[float]:
        return db.query(func.avg(Rating.rating)).filter(Rating.rated_user_id == user_id).scalar()

    @staticmethod
    def user_exists(db: Session, user_id: int) -> bool:
        return db.query(User.id).filter(User.id == user_id).first() is not None

    @staticmethod
    def add_rating(db: Session, **rating_data) -> Rating:
        """Stage a rating (no commit)"""
        rating = Rating(**rating_data)
        db.add(rating)
        db.flush()
        return rating
