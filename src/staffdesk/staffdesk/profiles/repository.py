from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .model import ProfileRecord


class ProfileRepository(Protocol):
    """Repository interface for HR profiles.

    Note (DIP): the service depends on this interface, not on a concrete DB.
    """

    def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        raise NotImplementedError

    def create_for_user(self, *, user_id: str, full_name: Optional[str], contact_email: Optional[str]) -> None:
        raise NotImplementedError

    def update_fields(self, user_id: str, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError
