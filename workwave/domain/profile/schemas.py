"""Profile domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

STRIPE_ACCOUNT_PATTERN = r"^acct_[A-Za-z0-9]+$"


class ProfileUpdate(BaseModel):
    """
    Fields the owner may change. Email and role are fixed at registration.

    bio, avatar and payoutAccountId accept null to clear the stored value.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    bio: Optional[str] = Field(None, max_length=2000)
    avatar: Optional[str] = Field(None, max_length=500)
    payoutAccountId: Optional[str] = Field(None, pattern=STRIPE_ACCOUNT_PATTERN, max_length=255)


class ProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    payoutAccountId: Optional[str] = None
    averageRating: Optional[float] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def profile_response(user) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        bio=user.bio,
        avatar=user.avatar,
        payoutAccountId=user.stripe_account_id,
        averageRating=user.average_rating,
        createdAt=user.created_at,
    )
