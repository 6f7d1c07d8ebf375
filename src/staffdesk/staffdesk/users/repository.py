from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
    ) -> str:
        raise NotImplementedError

    def update_user(self, user_id: str, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, user_id: str, when: datetime) -> None:
        raise NotImplementedError

    def list_directory(
        self,
        *,
        role: Optional[Role],
        search: Optional[str],
        exclude_id: Optional[str],
        limit: int,
    ) -> Sequence[dict]:
        """Active users joined with their job title, admins first then by name."""

        raise NotImplementedError

    def list_staff_with_counts(self) -> Sequence[dict]:
        raise NotImplementedError
