"""Profile completeness and field-level authorization rules.

Everything here is pure: functions take a profile (``ProfileRecord`` or a
plain mapping keyed by attribute or camelCase API names) and return values,
never touching the store.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping, Optional

from ..core.enums import Role
from .model import ProfileRecord, canonical_field_name, to_camel

REQUIRED_FIELDS = (
    "full_name",
    "mobile",
    "contact_email",
    "address_city",
    "address_country",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relationship",
)

# Counted as required only when they hold non-blank text.
REQUIRED_TEXT_FIELDS = ("education_summary", "work_experience_summary")

OPTIONAL_FIELDS = (
    "date_of_birth",
    "gender",
    "marital_status",
    "nationality",
    "profile_image",
    "document_type",
    "document_image",
    "education_summary",
    "work_experience_summary",
    "english_proficiency",
    "certifications",
    "professional_development",
)

REQUIRED_UNITS = len(REQUIRED_FIELDS) + len(REQUIRED_TEXT_FIELDS)
TRACKED_UNITS = REQUIRED_UNITS + len(OPTIONAL_FIELDS)

STAFF_EDITABLE_FIELDS = frozenset(
    {
        "full_name",
        "date_of_birth",
        "gender",
        "marital_status",
        "nationality",
        "profile_image",
        "mobile",
        "contact_email",
        "address_city",
        "address_country",
        "emergency_contact_name",
        "emergency_contact_phone",
        "emergency_contact_relationship",
        "education_summary",
        "work_experience_summary",
        "english_proficiency",
        "certifications",
        "professional_development",
        "document_type",
        "document_image",
    }
)

ADMIN_ONLY_FIELDS = frozenset(
    {
        "hire_date",
        "contract_type",
        "employment_status",
        "notice_period",
        "work_schedule",
        "work_location",
        "direct_manager_id",
        "job_title",
        "job_level",
        "basic_salary",
        "bonus",
    }
)

COORDINATE_BOUNDS = {
    "latitude": (-90.0, 90.0),
    "longitude": (-180.0, 180.0),
}

UPDATABLE_FIELDS = STAFF_EDITABLE_FIELDS | ADMIN_ONLY_FIELDS | frozenset(COORDINATE_BOUNDS)

DENY_NOT_OWNER = "Forbidden: not owner"
DENY_ADMIN_ONLY = "Forbidden: admin-only field"
DENY_COORDINATES_LOCKED = "Forbidden: coordinates locked"
DENY_UNKNOWN_FIELD = "Unknown field"

# Sections shown on the profile completion bar.
PROFILE_SECTIONS = (
    ("Personal", True, ("full_name", "date_of_birth", "gender", "marital_status", "nationality", "profile_image")),
    ("Contact", True, ("mobile", "contact_email", "address_city", "address_country")),
    ("Emergency Contact", True, ("emergency_contact_name", "emergency_contact_phone", "emergency_contact_relationship")),
    (
        "Education & Experience",
        True,
        (
            "education_summary",
            "work_experience_summary",
            "english_proficiency",
            "certifications",
            "professional_development",
        ),
    ),
    ("Documents", False, ("document_type", "document_image")),
)


@dataclass(frozen=True)
class FieldDecision:
    """Outcome of authorizing a write to one profile field."""

    field: str
    allowed: bool
    reason: Optional[str] = None
    value: Any = None

    @classmethod
    def allow(cls, field: str, value: Any = None) -> "FieldDecision":
        return cls(field=field, allowed=True, value=value)

    @classmethod
    def deny(cls, field: str, reason: str, value: Any = None) -> "FieldDecision":
        return cls(field=field, allowed=False, reason=reason, value=value)


def _get(profile, name: str) -> Any:
    if profile is None:
        return None
    if isinstance(profile, Mapping):
        if name in profile:
            return profile[name]
        if name == "user_id" and "id" in profile:
            return profile["id"]
        return profile.get(to_camel(name))
    return getattr(profile, name, None)


def is_complete(value: Any) -> bool:
    return value is not None and value != ""


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _round_half_up_percent(completed: int, total: int) -> int:
    # Integer form of floor(100 * completed / total + 0.5)
    return (200 * completed + total) // (2 * total)


def count_completed_units(profile) -> int:
    completed = sum(1 for name in REQUIRED_FIELDS if is_complete(_get(profile, name)))
    completed += sum(1 for name in REQUIRED_TEXT_FIELDS if _has_text(_get(profile, name)))
    completed += sum(1 for name in OPTIONAL_FIELDS if is_complete(_get(profile, name)))
    return completed


def compute_completion(profile) -> int:
    """Completion percentage (0-100) over the 22 tracked units."""
    return _round_half_up_percent(count_completed_units(profile), TRACKED_UNITS)


def completion_breakdown(profile) -> dict:
    sections = []
    for name, required, section_fields in PROFILE_SECTIONS:
        done = sum(1 for f in section_fields if is_complete(_get(profile, f)))
        sections.append(
            {
                "name": name,
                "required": required,
                "fields": len(section_fields),
                "completedFields": done,
                "completed": done == len(section_fields),
            }
        )

    completed = count_completed_units(profile)
    return {
        "percentage": _round_half_up_percent(completed, TRACKED_UNITS),
        "completedFields": completed,
        "totalFields": TRACKED_UNITS,
        "sections": sections,
    }


def _is_admin(role) -> bool:
    if isinstance(role, Role):
        return role == Role.ADMIN
    return str(role or "").upper() == Role.ADMIN.value


def coordinate_in_bounds(field_name: str, value: Any) -> bool:
    low, high = COORDINATE_BOUNDS[field_name]
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    number = float(value)
    return math.isfinite(number) and low <= number <= high


def coordinates_locked(profile) -> bool:
    """True once both coordinates hold in-bounds values."""
    return all(coordinate_in_bounds(name, _get(profile, name)) for name in COORDINATE_BOUNDS)


def check_ownership(actor_id: str, actor_role, profile) -> Optional[str]:
    """Deny reason when a non-admin targets someone else's profile, else None."""
    if _is_admin(actor_role):
        return None
    if str(actor_id) != str(_get(profile, "user_id")):
        return DENY_NOT_OWNER
    return None


def authorize_field_update(actor_role, field_name: str, current_profile, requested_value: Any) -> FieldDecision:
    name = canonical_field_name(field_name)
    admin = _is_admin(actor_role)

    if name not in UPDATABLE_FIELDS:
        return FieldDecision.deny(name, DENY_UNKNOWN_FIELD, requested_value)

    if name in ADMIN_ONLY_FIELDS and not admin:
        return FieldDecision.deny(name, DENY_ADMIN_ONLY, requested_value)

    if name in COORDINATE_BOUNDS:
        if not admin and coordinates_locked(current_profile):
            return FieldDecision.deny(name, DENY_COORDINATES_LOCKED, requested_value)
        if not coordinate_in_bounds(name, requested_value):
            return FieldDecision.deny(name, f"Invalid {name}", requested_value)

    return FieldDecision.allow(name, requested_value)


def evaluate_update(
    actor_id: str,
    actor_role,
    profile: ProfileRecord,
    changes: Mapping[str, Any],
) -> list[FieldDecision]:
    """Decide every field of one update request against the current profile."""
    not_owner = check_ownership(actor_id, actor_role, profile)
    if not_owner:
        return [FieldDecision.deny(canonical_field_name(k), not_owner, v) for k, v in changes.items()]
    return [authorize_field_update(actor_role, k, profile, v) for k, v in changes.items()]
