"""Rating service - client reviews of finished contracts"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Actor
from ...errors import ConflictError, ForbiddenError, NotFoundError
from ...models import ContractStage, Rating
from ...utils.sanitization import sanitize_string
from .repository import RatingRepository
from .schemas import RatingCreate

logger = logging.getLogger(__name__)


class RatingService:
    """Service layer for rating business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RatingRepository()

    def create_rating(self, data: RatingCreate, actor: Actor) -> Rating:
        """
        Rate the freelancer of a completed contract.

        One rating per contract and client. The freelancer's average rating is
        recomputed in the same transaction.

        Raises:
            ForbiddenError: caller is not the contract's client
            ConflictError: contract not completed, or already rated
        """
        if not actor.is_client:
            raise ForbiddenError("Only clients can rate freelancers")

        contract = self.repo.get_contract(self.db, data.contractId)
        if not contract:
            raise NotFoundError("Contract not found")
        if contract.client_id != actor.id:
            raise ForbiddenError("You can only rate your own contracts")
        if contract.stage != ContractStage.COMPLETED.value:
            raise ConflictError("Only completed contracts can be rated")
        if self.repo.exists(self.db, contract.id, actor.id):
            raise ConflictError("You have already rated this contract")

        try:
            rating = self.repo.add_rating(
                self.db,
                contract_id=contract.id,
                rater_id=actor.id,
                rated_user_id=contract.freelancer_id,
                rating=data.rating,
                review=sanitize_string(data.review),
            )
            freelancer = contract.freelancer
            freelancer.average_rating = self.repo.average_for_user(self.db, freelancer.id)
            self.db.commit()
        except IntegrityError as e:
            # Rated twice at the same moment
            self.db.rollback()
            raise ConflictError("You have already rated this contract") from e

        self.db.refresh(rating)
        logger.info(
            f"⭐ Contract {contract.id} rated {data.rating} by user {actor.id}; "
            f"freelancer {freelancer.id} now averages {freelancer.average_rating:.2f}"
        )
        return rating

    def list_ratings(self, freelancer_id: int) -> list[Rating]:
        if not self.repo.user_exists(self.db, freelancer_id):
            raise NotFoundError("User not found")
        return self.repo.get_for_user(self.db, freelancer_id)
