from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User account.

    Note: plain data object (no DB access code here).
    """

    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


def user_to_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "department": user.department,
        "isActive": user.is_active,
        "lastLogin": isoformat_or_none(user.last_login),
        "createdAt": isoformat_or_none(user.created_at),
    }
