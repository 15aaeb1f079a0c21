"""User Service - Handles user profile database operations"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shiftease.auth.models import AuthUser, Caller
from shiftease.errors import StoreUnavailable
from shiftease.models.user import User, UserProfileUpdate, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service for handling user operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Get a user by their identity provider subject

        Args:
            user_id: Subject of the user to retrieve

        Returns:
            User object if found, None otherwise
        """
        return self.db.get(User, user_id)

    def get_users_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        """Fetch several users at once, keyed by id. Unknown ids are absent."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        rows = self.db.exec(select(User).where(User.id.in_(ids))).all()
        return {user.id: user for user in rows}

    def resolve_caller(self, auth_user: AuthUser) -> Caller:
        """Combine the token identity with the stored role"""
        user = self.get_user_by_id(auth_user.user_id)
        if user is None:
            return Caller(user_id=auth_user.user_id, email=auth_user.email)
        return Caller(
            user_id=user.id,
            email=user.email or auth_user.email,
            role=user.role,
        )

    def get_or_default(self, auth_user: AuthUser) -> User:
        """Return the stored profile, or an unsaved default one"""
        user = self.get_user_by_id(auth_user.user_id)
        if user is not None:
            return user
        return User(id=auth_user.user_id, email=auth_user.email)

    def upsert_profile(
        self,
        user_id: str,
        profile: UserProfileUpdate,
        default_email: Optional[str] = None,
    ) -> User:
        """
        Create or update the profile of a user.

        The role is never taken from the profile; new users start as ``user``.
        """
        try:
            user = self.db.get(User, user_id)
            if user is None:
                user = User(id=user_id, email=default_email)

            for field, value in profile.model_dump(exclude_unset=True).items():
                setattr(user, field, value)

            user.updated_at = datetime.now(timezone.utc)

            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User profile saved: {user.id}")
            return user

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving user {user_id}: {e}")
            raise StoreUnavailable(f"Failed to save user: {str(e)}") from e

    def set_role(self, user_id: str, role: UserRole) -> User:
        """Assign a role, creating a bare profile when the user has none yet"""
        try:
            user = self.db.get(User, user_id)
            if user is None:
                user = User(id=user_id)
            user.role = role
            user.updated_at = datetime.now(timezone.utc)

            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User {user_id} role set to {role.value}")
            return user

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error setting role for user {user_id}: {e}")
            raise StoreUnavailable(f"Failed to update role: {str(e)}") from e
