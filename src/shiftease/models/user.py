"""SQLModel User model"""

import enum
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel
from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(SQLModel, table=True):
    """User profile keyed by the identity provider subject"""

    __tablename__ = "users"

    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    avatar_color: Optional[str] = None
    language: Optional[str] = None  # "he" or "en"
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=Column(
            SAEnum(
                UserRole,
                name="user_role",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )


class UserProfileUpdate(BaseModel):
    """Profile fields a user may change on their own record (never the role)"""

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    avatar_color: Optional[str] = None
    language: Optional[Literal["he", "en"]] = None
