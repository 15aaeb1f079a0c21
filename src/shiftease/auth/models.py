"""Authentication models for FastAPI"""

from typing import Optional

from pydantic import BaseModel

from shiftease.models.user import UserRole


class AuthUser(BaseModel):
    """Identity extracted from a verified identity provider token"""

    user_id: str
    email: Optional[str] = None
    claims: dict


class Caller(BaseModel):
    """Authenticated caller with the role stored in the users table"""

    user_id: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
