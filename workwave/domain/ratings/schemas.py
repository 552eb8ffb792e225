"""Rating domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...schemas import UserSummary, user_summary


class RatingCreate(BaseModel):
    """A client's rating of the freelancer on one of their contracts"""

    contractId: int
    rating: float = Field(..., ge=0.5, le=5, multiple_of=0.5)
    review: str = Field(..., min_length=10, max_length=500)


class RatingResponse(BaseModel):
    id: int
    contractId: int
    contractTitle: Optional[str] = None
    ratedUserId: int
    rating: float
    review: str
    rater: Optional[UserSummary] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def rating_response(rating) -> RatingResponse:
    return RatingResponse(
        id=rating.id,
        contractId=rating.contract_id,
        contractTitle=rating.contract.title if rating.contract else None,
        ratedUserId=rating.rated_user_id,
        rating=rating.rating,
        review=rating.review,
        rater=user_summary(rating.rater),
        createdAt=rating.created_at,
    )
