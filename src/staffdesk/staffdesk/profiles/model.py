from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class ProfileRecord:
    """HR profile of one user.

    Plain data object; every field except the identity may be absent.
    """

    user_id: str
    role: Role

    # Personal (staff-editable)
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    nationality: Optional[str] = None
    profile_image: Optional[str] = None

    # Contact (staff-editable)
    mobile: Optional[str] = None
    contact_email: Optional[str] = None
    address_city: Optional[str] = None
    address_country: Optional[str] = None

    # Geolocation (locked once both are set)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Emergency contact (staff-editable)
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None

    # Summaries (staff-editable)
    education_summary: Optional[str] = None
    work_experience_summary: Optional[str] = None
    english_proficiency: Optional[str] = None
    certifications: Optional[str] = None
    professional_development: Optional[str] = None

    # Documents (staff-editable)
    document_type: Optional[str] = None
    document_image: Optional[str] = None

    # Employment (admin-only)
    hire_date: Optional[date] = None
    contract_type: Optional[str] = None
    employment_status: Optional[str] = None
    notice_period: Optional[int] = None
    work_schedule: Optional[str] = None
    work_location: Optional[str] = None
    direct_manager_id: Optional[str] = None
    job_title: Optional[str] = None
    job_level: Optional[str] = None
    basic_salary: Optional[str] = None
    bonus: Optional[str] = None


PROFILE_FIELD_NAMES = tuple(f.name for f in fields(ProfileRecord))


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# camelCase name used by the JSON API -> attribute name
FIELD_ALIASES = {to_camel(name): name for name in PROFILE_FIELD_NAMES}
FIELD_ALIASES["id"] = "user_id"


def canonical_field_name(name: str) -> str:
    return FIELD_ALIASES.get(name, name)


def profile_to_dict(profile: ProfileRecord) -> dict:
    out = {}
    for name in PROFILE_FIELD_NAMES:
        value = getattr(profile, name)
        if isinstance(value, Role):
            value = value.value
        elif isinstance(value, date):
            value = value.isoformat()
        out[to_camel(name)] = value
    return out
