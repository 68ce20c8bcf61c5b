import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from domain.mappers import encode_list
from domain.models import User
from domain.schemas.user_schemas import ProfileUpdate
from repositories import UserRepository
from services.security import sanitize_input

logger = logging.getLogger("dietplanner.profile")


class ProfileService:
    """Business logic for profile management"""

    @staticmethod
    def get_user(db: Session, user_id: UUID) -> Optional[User]:
        """Retrieve a user; plans are loaded lazily by the caller"""
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            logger.warning(f"profile_not_found user_id={user_id}")
        return user

    @staticmethod
    def update_profile(db: Session, user_id: UUID, profile_data: ProfileUpdate) -> User:
        """
        Update the personal fields that drive plan generation.

        Only fields present in ``profile_data`` are written, except
        ``preferences`` which is replaced by an empty list when omitted.
        """
        repo = UserRepository(db)
        user = repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")

        changes = profile_data.model_dump(exclude_unset=True)
        preferences = changes.pop("preferences", None) or []

        if "name" in changes and changes["name"] is not None:
            changes["name"] = sanitize_input(changes["name"])
        if changes.get("nationality"):
            changes["nationality"] = sanitize_input(changes["nationality"])

        for key, value in changes.items():
            if key == "name" and not value:
                continue
            setattr(user, key, value)
        user.preferences = encode_list(sanitize_input(p) for p in preferences)

        repo.update(user)
        logger.info(
            f"profile_updated user_id={user_id} fields={sorted(changes)} "
            f"preferences_count={len(preferences)}"
        )
        return user
