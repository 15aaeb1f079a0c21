"""Users router - own profile and role management"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from shiftease.auth.dependencies import get_current_user, require_admin
from shiftease.auth.models import AuthUser, Caller
from shiftease.models.database import get_db
from shiftease.models.user import User, UserProfileUpdate, UserRole
from shiftease.services.user_service import UserService
from shiftease.utils.names import avatar_color, display_name, initials

router = APIRouter(prefix="/users", tags=["Users"])


class UserOut(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    language: Optional[str] = None
    role: UserRole
    display_name: str
    initials: str
    avatar_color: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RoleUpdate(BaseModel):
    role: UserRole


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        phone_number=user.phone_number,
        profile_picture=user.profile_picture,
        language=user.language,
        role=user.role or UserRole.USER,
        display_name=display_name(user),
        initials=initials(user),
        avatar_color=avatar_color(user),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.get("/me", response_model=UserOut, summary="My profile")
def get_me(
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return to_user_out(UserService(db).get_or_default(auth_user))


@router.put("/me", response_model=UserOut, summary="Update my profile")
def update_me(
    profile: UserProfileUpdate,
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = UserService(db).upsert_profile(
        auth_user.user_id, profile, default_email=auth_user.email
    )
    return to_user_out(user)


@router.put("/{user_id}/role", response_model=UserOut, summary="Assign a role")
def set_user_role(
    user_id: str,
    body: RoleUpdate,
    _: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return to_user_out(UserService(db).set_role(user_id, body.role))
