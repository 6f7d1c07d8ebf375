from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_DIRECTORY_LIMIT, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..profiles.repository import ProfileRepository
from .model import User
from .repository import UserRepository

log = logging.getLogger(__name__)

_MAX_DIRECTORY_LIMIT = 200


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    name: str
    email: str
    role: Role
    department: Optional[str]


def _parse_role(value, *, allow_all: bool = False) -> Optional[Role]:
    if value is None or value == "" or (allow_all and str(value).upper() == "ALL"):
        return None
    try:
        return Role(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid role")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        self._users.touch_last_login(user.user_id, now_local())

        return SessionUser(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            department=user.department,
        )


class UserService:
    """Use case: manage users (admin) and self-service account actions."""

    def __init__(self, users: UserRepository, profiles: ProfileRepository):
        self._users = users
        self._profiles = profiles

    def _require(self, user_id: str) -> User:
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_user(self, *, user_id: str) -> User:
        return self._require(user_id)

    def list_users(self, *, current_role: Role, role=None) -> Sequence[User]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can list users")
        return self._users.list_all(role=_parse_role(role, allow_all=True))

    def create_account(
        self,
        *,
        current_role: Role,
        name: str,
        email: str,
        password: str,
        role,
        department: Optional[str] = None,
    ) -> str:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create accounts")

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        new_role = _parse_role(role) or Role.STAFF

        if new_role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be created here")

        if self._users.get_by_email(email):
            raise ValidationError("User with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=new_role,
            department=(department or "").strip() or None,
        )
        self._profiles.create_for_user(user_id=user_id, full_name=name, contact_email=email)
        log.info("account %s created (%s)", user_id, new_role.value)
        return user_id

    def update_user(
        self,
        *,
        current_role: Role,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role=None,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> User:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can update accounts")

        user = self._require(user_id)
        changes: dict = {}

        if name is not None:
            changes["name"] = require_non_empty(name, "Name")
        if email is not None:
            email = require_email(email)
            if email != user.email:
                if self._users.get_by_email(email):
                    raise ValidationError("Email is already taken by another user")
                changes["email"] = email
        if role is not None:
            changes["role"] = _parse_role(role)
        if department is not None:
            changes["department"] = department.strip() or None
        if is_active is not None:
            changes["is_active"] = bool(is_active)

        if changes:
            self._users.update_user(user.user_id, changes)
        return self._require(user_id)

    def deactivate_user(self, *, actor_id: str, current_role: Role, user_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can deactivate accounts")

        user = self._require(user_id)
        if user.user_id == str(actor_id):
            raise ValidationError("You cannot deactivate your own account")

        self._users.set_active(user.user_id, is_active=False)
        log.info("account %s deactivated by %s", user.user_id, actor_id)

    def reset_password(self, *, current_role: Role, user_id: str, new_password: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can reset passwords")

        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        user = self._require(user_id)
        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))
        log.info("password of %s reset by admin", user.user_id)

    def change_password(self, *, actor_id: str, user_id: str, current_password: str, new_password: str) -> None:
        if str(actor_id) != str(user_id):
            raise AuthorizationError("You can only change your own password")

        require_non_empty(current_password, "Current password")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        user = self._require(user_id)

        try:
            ok = check_password_hash(user.password_hash, current_password)
        except ValueError:
            ok = False
        if not ok:
            raise ValidationError("Current password is incorrect")

        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))

    def list_directory(
        self,
        *,
        role=None,
        search: Optional[str] = None,
        exclude_id: Optional[str] = None,
        limit: int = DEFAULT_DIRECTORY_LIMIT,
    ) -> Sequence[dict]:
        limit = max(1, min(int(limit), _MAX_DIRECTORY_LIMIT))
        return self._users.list_directory(
            role=_parse_role(role, allow_all=True),
            search=(search or "").strip() or None,
            exclude_id=exclude_id,
            limit=limit,
        )

    def staff_directory(self) -> Sequence[dict]:
        return self._users.list_staff_with_counts()
