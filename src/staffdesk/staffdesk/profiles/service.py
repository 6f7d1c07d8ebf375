from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from ..common.datetime_utils import parse_iso_date
from ..core.enums import DocumentType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import ProfileRecord
from .repository import ProfileRepository
from .rules import (
    COORDINATE_BOUNDS,
    FieldDecision,
    check_ownership,
    completion_breakdown,
    compute_completion,
    evaluate_update,
)

log = logging.getLogger(__name__)

_DATE_FIELDS = frozenset({"date_of_birth", "hire_date"})
_INT_FIELDS = frozenset({"notice_period"})


@dataclass(frozen=True)
class ProfileUpdateResult:
    profile: ProfileRecord
    applied: list[str] = field(default_factory=list)
    denied: list[FieldDecision] = field(default_factory=list)
    completion: int = 0


def _coerce(name: str, value: Any) -> Any:
    """Convert a JSON value to the column type; raises ValueError when it cannot."""
    if value == "" and (name in _DATE_FIELDS or name in _INT_FIELDS or name == "document_type"):
        return None
    if value is None:
        return None
    if name in _DATE_FIELDS:
        if isinstance(value, date):
            return value
        return parse_iso_date(str(value)[:10])
    if name in _INT_FIELDS:
        if isinstance(value, bool):
            raise ValueError(name)
        return int(value)
    if name == "document_type":
        return DocumentType(str(value)).value
    if name in COORDINATE_BOUNDS:
        return float(value)
    return value


class ProfileService:
    """Use case: read and edit HR profiles."""

    def __init__(self, profiles: ProfileRepository, *, atomic_updates: bool = False):
        self._profiles = profiles
        self._atomic = bool(atomic_updates)

    def _load(self, user_id: str) -> ProfileRecord:
        profile = self._profiles.get_by_user_id(str(user_id))
        if not profile:
            raise NotFoundError("User not found")
        return profile

    def _load_owned(self, actor_id: str, actor_role: Role, user_id: str, message: str) -> ProfileRecord:
        # Checked before the lookup: non-admins get 403 for every foreign id, known or not.
        if check_ownership(actor_id, actor_role, {"user_id": str(user_id)}):
            raise AuthorizationError(message)
        return self._load(user_id)

    def get_profile(self, *, actor_id: str, actor_role: Role, user_id: str) -> ProfileRecord:
        return self._load_owned(actor_id, actor_role, user_id, "You can only view your own profile")

    def completion(self, *, actor_id: str, actor_role: Role, user_id: str) -> dict:
        return completion_breakdown(self.get_profile(actor_id=actor_id, actor_role=actor_role, user_id=user_id))

    def update_profile(
        self,
        *,
        actor_id: str,
        actor_role: Role,
        user_id: str,
        changes: Mapping[str, Any],
    ) -> ProfileUpdateResult:
        if not changes:
            raise ValidationError("At least one field must be provided for update")

        profile = self._load_owned(actor_id, actor_role, user_id, "You can only update your own profile")
        decisions = evaluate_update(actor_id, actor_role, profile, changes)

        to_apply: dict[str, Any] = {}
        denied: list[FieldDecision] = []
        for decision in decisions:
            if not decision.allowed:
                denied.append(decision)
                continue
            try:
                to_apply[decision.field] = _coerce(decision.field, decision.value)
            except (TypeError, ValueError):
                denied.append(FieldDecision.deny(decision.field, f"Invalid {decision.field}", decision.value))

        if denied and self._atomic:
            to_apply = {}

        if to_apply:
            self._profiles.update_fields(profile.user_id, to_apply)
            if any(name in COORDINATE_BOUNDS for name in to_apply):
                log.info(
                    "coordinates of %s set by %s (%s): %s",
                    profile.user_id,
                    actor_id,
                    Role(actor_role).value,
                    {k: v for k, v in to_apply.items() if k in COORDINATE_BOUNDS},
                )
            profile = self._load(user_id)

        if denied:
            log.info("profile %s update by %s: denied %s", profile.user_id, actor_id, [d.field for d in denied])

        return ProfileUpdateResult(
            profile=profile,
            applied=list(to_apply),
            denied=denied,
            completion=compute_completion(profile),
        )

    def clear_coordinates(self, *, actor_role: Role, user_id: str) -> ProfileRecord:
        """Admin override: unlock the coordinates so they can be captured again."""
        if actor_role != Role.ADMIN:
            raise AuthorizationError("Only admins can reset coordinates")

        profile = self._load(user_id)
        self._profiles.update_fields(profile.user_id, {"latitude": None, "longitude": None})
        log.info("coordinates of %s cleared by admin", profile.user_id)
        return self._load(user_id)
