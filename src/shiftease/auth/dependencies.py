"""Authentication dependencies for FastAPI"""

from typing import Optional

from authlib.jose.errors import InvalidTokenError
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from shiftease.auth.jwt_utils import jwt_utils
from shiftease.auth.models import AuthUser, Caller
from shiftease.errors import AdminRequired, NotAuthenticated
from shiftease.logging_config import get_logger
from shiftease.models.database import get_db
from shiftease.services.user_service import UserService

# auto_error=False so a missing header reaches get_current_user as None
security = HTTPBearer(auto_error=False)

logger = get_logger(__name__)


async def _user_from_token(token: str) -> AuthUser:
    try:
        return await jwt_utils.extract_user(token)
    except InvalidTokenError as e:
        raise NotAuthenticated(f"Invalid token: {str(e)}")
    except Exception:
        logger.exception("Token validation failed")
        raise NotAuthenticated("Token validation failed")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    FastAPI dependency to extract and validate the caller from a JWT Bearer token

    Raises:
        NotAuthenticated: if token is missing, invalid, or expired
    """
    if not credentials:
        raise NotAuthenticated("Missing authorization token")

    return await _user_from_token(credentials.credentials)


async def get_current_user_optional(request: Request) -> Optional[AuthUser]:
    """
    FastAPI dependency for endpoints that accept anonymous callers.

    Returns:
        - Authenticated user if a valid Bearer token is provided
        - None if there is no Bearer token

    Raises:
        NotAuthenticated: if a token is provided but invalid/expired
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header[7:]  # Remove "Bearer " prefix
    return await _user_from_token(token)


def get_caller(
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Caller:
    """Resolve the caller's role from the users table (default: user)"""
    return UserService(db).resolve_caller(auth_user)


def get_optional_caller(
    auth_user: Optional[AuthUser] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> Optional[Caller]:
    if auth_user is None:
        return None
    return UserService(db).resolve_caller(auth_user)


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """Dependency for administrator-only endpoints"""
    if not caller.is_admin:
        raise AdminRequired()
    return caller
