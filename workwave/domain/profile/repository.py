"""Profile repository - Database operations for user profiles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import User


class ProfileRepository:
    """Repository for profile database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def update(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user
