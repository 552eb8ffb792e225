"""Profile service - the caller's own account details and payout account"""

import logging

from sqlalchemy.orm import Session

from ...auth import Actor
from ...errors import ForbiddenError, NotAuthenticatedError
from ...models import User
from ...utils.sanitization import sanitize_string
from .repository import ProfileRepository
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    """Service layer for profile business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfileRepository()

    def get_profile(self, actor: Actor) -> User:
        user = self.repo.get_by_id(self.db, actor.id)
        if not user:
            raise NotAuthenticatedError()
        return user

    def update_profile(self, actor: Actor, data: ProfileUpdate) -> User:
        """
        Apply the fields present in the request.

        The payout account is the Stripe connected account escrow releases are
        transferred to, so only freelancers may set it.
        """
        user = self.get_profile(actor)
        fields = data.model_fields_set

        if "payoutAccountId" in fields and not actor.is_freelancer:
            raise ForbiddenError("Only freelancers can set a payout account")

        updates = {}
        if data.name is not None:
            updates["name"] = sanitize_string(data.name)
        if "bio" in fields:
            updates["bio"] = sanitize_string(data.bio) if data.bio else None
        if "avatar" in fields:
            updates["avatar"] = data.avatar or None
        if "payoutAccountId" in fields:
            updates["stripe_account_id"] = data.payoutAccountId

        user = self.repo.update(self.db, user, **updates)
        logger.info(f"👤 Profile of user {user.id} updated: {sorted(updates)}")
        return user
