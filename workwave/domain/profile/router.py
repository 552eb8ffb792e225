"""Profile router - FastAPI endpoints for the caller's profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from .schemas import ProfileUpdate, profile_response
from .service import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    """Dependency injection for ProfileService"""
    return ProfileService(db)


@router.get("")
async def get_profile(
    actor: Actor = Depends(get_current_actor),
    service: ProfileService = Depends(get_profile_service),
):
    return {"profile": profile_response(service.get_profile(actor))}


@router.api_route("", methods=["PUT", "PATCH"])
async def update_profile(
    data: ProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ProfileService = Depends(get_profile_service),
):
    """Partial update; PUT and PATCH behave the same"""
    user = service.update_profile(actor, data)
    return {"message": "Profile updated successfully", "profile": profile_response(user)}
