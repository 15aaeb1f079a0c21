"""Display helpers for user profiles: name, initials and avatar colour"""

from typing import Optional

from shiftease.models.user import User

AVATAR_PALETTE = [
    "#7c3aed",
    "#2563eb",
    "#059669",
    "#d97706",
    "#dc2626",
    "#0ea5e9",
    "#14b8a6",
    "#f59e0b",
]


def _clean(value: Optional[str]) -> str:
    return " ".join((value or "").split())


def _email_local_part(user: Optional[User], fallback_email: str = "") -> str:
    email = fallback_email or (user.email if user else "") or ""
    return email.split("@")[0]


def display_name(user: Optional[User], fallback_email: str = "") -> str:
    """``first last`` if either is set, else full name, else email local part"""
    if user is not None:
        first = _clean(user.first_name)
        last = _clean(user.last_name)
        if first or last:
            return f"{first} {last}".strip()
        full = _clean(user.full_name)
        if full:
            return full
    return _email_local_part(user, fallback_email)


def initials(user: Optional[User], fallback_email: str = "") -> str:
    if user is not None:
        first = _clean(user.first_name)
        last = _clean(user.last_name)
        if first and last:
            return f"{first[0]}{last[0]}"
        name = _clean(user.full_name) or first or last
        if name:
            parts = name.split(" ")
            if len(parts) == 1:
                return parts[0][:2]
            return f"{parts[0][0]}{parts[-1][0]}"

    local_part = _email_local_part(user, fallback_email)
    if local_part:
        return local_part[:2].upper()

    user_id = (user.id if user else "") or ""
    return (user_id[:2] or "??").upper()


def string_hash(key: str) -> int:
    """31-multiplier rolling hash kept within 32 bits"""
    value = 0
    for char in key:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return value


def avatar_color(user: Optional[User], seed: str = "") -> str:
    if user is not None and user.avatar_color:
        return user.avatar_color
    key = seed
    if user is not None:
        key = (
            user.id
            or user.email
            or user.first_name
            or user.last_name
            or user.full_name
            or seed
        )
    return AVATAR_PALETTE[string_hash(key or "") % len(AVATAR_PALETTE)]
