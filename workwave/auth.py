import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import JWT_ALGORITHM, SECRET_KEY, SESSION_COOKIE_NAME, SESSION_MAX_AGE_DAYS
from .database import get_db
from .errors import NotAuthenticatedError
from .models import User, UserRole

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every service operation"""

    id: int
    role: str
    email: str
    name: str

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT.value

    @property
    def is_freelancer(self) -> bool:
        return self.role == UserRole.FREELANCER.value

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=user.role, email=user.email, name=user.name)


# ============================================================================
# PASSWORDS & SESSION TOKENS
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


def create_session_token(user: User) -> str:
    """Signed session JWT carrying id, email and role, valid for SESSION_MAX_AGE_DAYS"""
    expire = datetime.now(timezone.utc) + timedelta(days=SESSION_MAX_AGE_DAYS)
    payload = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Returns the token payload, or None when the signature or expiry is invalid"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Session token rejected: {e}")
        return None


# ============================================================================
# DEPENDENCIES
# ============================================================================


def get_current_user(
    token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the session cookie to a stored user"""
    if not token:
        raise NotAuthenticatedError()

    payload = decode_session_token(token)
    if not payload or "id" not in payload:
        raise NotAuthenticatedError()

    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        logger.warning(f"⚠️ Session token for unknown user id {payload.get('id')}")
        raise NotAuthenticatedError()

    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


def get_optional_actor(
    token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    """Actor for public endpoints that personalise output when a session is present"""
    if not token:
        return None
    payload = decode_session_token(token)
    if not payload or "id" not in payload:
        return None
    user = db.query(User).filter(User.id == payload["id"]).first()
    return Actor.from_user(user) if user else None
