"""Rating router - FastAPI endpoints for contract ratings"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from .schemas import RatingCreate, rating_response
from .service import RatingService

router = APIRouter(prefix="/ratings", tags=["Ratings"])


def get_rating_service(db: Session = Depends(get_db)) -> RatingService:
    """Dependency injection for RatingService"""
    return RatingService(db)


@router.post("", status_code=201)
async def create_rating(
    data: RatingCreate,
    actor: Actor = Depends(get_current_actor),
    service: RatingService = Depends(get_rating_service),
):
    return {"rating": rating_response(service.create_rating(data, actor))}


@router.get("")
async def list_ratings(
    freelancerId: int = Query(..., description="User whose received ratings are listed"),
    actor: Actor = Depends(get_current_actor),
    service: RatingService = Depends(get_rating_service),
):
    """Ratings a freelancer received, newest first"""
    return {"ratings": [rating_response(r) for r in service.list_ratings(freelancerId)]}
