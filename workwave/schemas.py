from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .models import UserRole


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    """Counterpart details embedded in bids, contracts and invoices"""

    id: int
    name: str
    email: str


class MessageResponse(BaseModel):
    message: str


def user_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        bio=user.bio,
        avatar=user.avatar,
        createdAt=user.created_at,
    )


def user_summary(user) -> Optional[UserSummary]:
    if not user:
        return None
    return UserSummary(id=user.id, name=user.name, email=user.email)
