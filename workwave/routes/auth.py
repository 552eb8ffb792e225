import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import create_session_token, get_current_user, hash_password, verify_password
from ..config import IS_PRODUCTION, SESSION_COOKIE_NAME, SESSION_MAX_AGE_DAYS
from ..database import get_db
from ..errors import ConflictError, NotAuthenticatedError
from ..models import User
from ..schemas import MessageResponse, UserLogin, UserRegister, user_response
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
        path="/",
    )


@router.post("/register", status_code=201)
async def register(data: UserRegister, db: Session = Depends(get_db)):
    """Create an account. Role is fixed from here on."""
    existing = db.query(User).filter(User.email == data.email).first()
    if existing:
        raise ConflictError("Email already in use")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        name=sanitize_string(data.name),
        role=data.role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Email taken between the check and the insert
        db.rollback()
        raise ConflictError("Email already in use") from e
    db.refresh(user)

    logger.info(f"🆕 Registered {user.role.lower()} user {user.id}")
    return {"message": "User created successfully", "user": user_response(user)}


@router.post("/login")
async def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email.strip().lower()).first()
    if not user or not verify_password(data.password, user.password_hash):
        logger.warning("⚠️ Failed login attempt")
        raise NotAuthenticatedError("Invalid email or password")

    _set_session_cookie(response, create_session_token(user))
    logger.info(f"✅ User {user.id} logged in")
    return {"user": user_response(user)}


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"user": user_response(current_user)}


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
    )
    return MessageResponse(message="Logged out successfully")
