from __future__ import annotations

import math

import pytest

from src.staffdesk.staffdesk.core.enums import Role
from src.staffdesk.staffdesk.profiles.model import ProfileRecord
from src.staffdesk.staffdesk.profiles.rules import (
    DENY_ADMIN_ONLY,
    DENY_COORDINATES_LOCKED,
    DENY_NOT_OWNER,
    DENY_UNKNOWN_FIELD,
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    TRACKED_UNITS,
    authorize_field_update,
    completion_breakdown,
    compute_completion,
    coordinates_locked,
    evaluate_update,
)

REQUIRED_VALUES = {
    "full_name": "Ahmed Developer",
    "mobile": "+20 100 000 0000",
    "contact_email": "ahmed@example.com",
    "address_city": "Cairo",
    "address_country": "Egypt",
    "emergency_contact_name": "Sara",
    "emergency_contact_phone": "+20 100 000 0001",
    "emergency_contact_relationship": "Sister",
}


def _profile(**values) -> ProfileRecord:
    return ProfileRecord(user_id="u-staff", role=Role.STAFF, **values)


def test_tracked_units_total_22():
    assert len(REQUIRED_FIELDS) == 8
    assert len(OPTIONAL_FIELDS) == 12
    assert TRACKED_UNITS == 22


def test_empty_profile_is_zero_percent():
    assert compute_completion(_profile()) == 0
    assert compute_completion({}) == 0


def test_only_full_name_rounds_up_to_five():
    assert compute_completion(_profile(full_name="Ahmed")) == 5
    assert compute_completion({"fullName": "Ahmed"}) == 5


def test_required_scalars_plus_both_summaries_counts_summary_overlap():
    # The summaries count once as required text and once as optional fields: 12 of 22 units.
    profile = _profile(
        **REQUIRED_VALUES,
        education_summary="BSc Computer Science",
        work_experience_summary="3 years backend",
    )
    assert compute_completion(profile) == 55


def test_every_unit_filled_is_hundred_percent():
    profile = _profile(
        **REQUIRED_VALUES,
        date_of_birth="1995-04-02",
        gender="Male",
        marital_status="Single",
        nationality="Egyptian",
        profile_image="/img/a.png",
        document_type="PASSPORT",
        document_image="/img/p.png",
        education_summary="BSc",
        work_experience_summary="3 years",
        english_proficiency="Fluent",
        certifications="AWS",
        professional_development="Courses",
    )
    assert compute_completion(profile) == 100


def test_numeric_zero_counts_as_complete():
    assert compute_completion({"fullName": 0}) == 5


def test_blank_summary_counts_only_as_optional_field():
    # "   " is not "", so the optional unit counts; the trimmed required check does not
    assert compute_completion({"educationSummary": "   "}) == 5
    assert compute_completion({"educationSummary": "BSc"}) == 9


def test_completion_is_monotonic_as_fields_are_filled():
    values: dict = {}
    last = compute_completion(values)
    extra = {name: "x" for name in OPTIONAL_FIELDS}
    for name, value in list(REQUIRED_VALUES.items()) + list(extra.items()):
        values[name] = value
        current = compute_completion(values)
        assert current >= last
        last = current
    assert last == 100


def test_completion_breakdown_reports_sections():
    breakdown = completion_breakdown(_profile(full_name="Ahmed", mobile="123"))

    assert breakdown["percentage"] == 9
    assert breakdown["completedFields"] == 2
    assert breakdown["totalFields"] == 22
    sections = {s["name"]: s for s in breakdown["sections"]}
    assert sections["Personal"]["completedFields"] == 1
    assert sections["Contact"]["completedFields"] == 1
    assert sections["Documents"]["required"] is False


def test_staff_cannot_write_admin_only_field():
    decision = authorize_field_update(Role.STAFF, "jobTitle", _profile(), "Engineer")

    assert decision.allowed is False
    assert decision.reason == DENY_ADMIN_ONLY
    assert decision.field == "job_title"


@pytest.mark.parametrize("role", [Role.STAFF, Role.CLIENT])
@pytest.mark.parametrize("field", ["hireDate", "basicSalary", "directManagerId", "noticePeriod"])
def test_non_admin_employment_writes_always_denied(role, field):
    decision = authorize_field_update(role, field, _profile(), "value")
    assert decision.reason == DENY_ADMIN_ONLY


def test_admin_can_write_admin_only_field():
    assert authorize_field_update(Role.ADMIN, "jobTitle", _profile(), "Engineer").allowed


def test_first_time_coordinates_allowed_for_staff():
    profile = _profile()
    assert not coordinates_locked(profile)
    assert authorize_field_update(Role.STAFF, "latitude", profile, 30.0444).allowed
    assert authorize_field_update(Role.STAFF, "longitude", profile, 31.2357).allowed


def test_half_set_coordinates_are_not_locked():
    profile = _profile(latitude=30.0)
    assert authorize_field_update(Role.STAFF, "longitude", profile, 31.0).allowed


def test_locked_coordinates_denied_for_staff_allowed_for_admin():
    profile = _profile(latitude=30.0444, longitude=31.2357)
    assert coordinates_locked(profile)

    staff = authorize_field_update(Role.STAFF, "latitude", profile, 29.0)
    assert staff.allowed is False
    assert staff.reason == DENY_COORDINATES_LOCKED

    assert authorize_field_update(Role.ADMIN, "latitude", profile, 29.0).allowed
    assert authorize_field_update(Role.ADMIN, "latitude", profile, 91).reason == "Invalid latitude"


@pytest.mark.parametrize(
    "value, allowed",
    [(-90, True), (90, True), (0, True), (45.5, True), (90.0001, False), (-90.5, False)],
)
def test_latitude_bounds(value, allowed):
    assert authorize_field_update(Role.STAFF, "latitude", _profile(), value).allowed is allowed


@pytest.mark.parametrize("value, allowed", [(-180, True), (180, True), (180.1, False), (-181, False)])
def test_longitude_bounds(value, allowed):
    decision = authorize_field_update(Role.STAFF, "longitude", _profile(), value)
    assert decision.allowed is allowed
    if not allowed:
        assert decision.reason == "Invalid longitude"


@pytest.mark.parametrize("value", ["45", True, None, math.nan, math.inf])
def test_non_numeric_coordinates_are_invalid(value):
    decision = authorize_field_update(Role.STAFF, "latitude", _profile(), value)
    assert decision.reason == "Invalid latitude"


@pytest.mark.parametrize("field", ["passwordHash", "role", "isActive", "id"])
def test_fields_outside_allow_list_are_denied(field):
    assert authorize_field_update(Role.ADMIN, field, _profile(), "x").reason == DENY_UNKNOWN_FIELD


def test_staff_editable_fields_allowed_for_owner():
    assert authorize_field_update(Role.STAFF, "fullName", _profile(), "Ahmed").allowed
    assert authorize_field_update(Role.CLIENT, "educationSummary", _profile(), "BSc").allowed


def test_non_owner_batch_is_denied_field_by_field():
    decisions = evaluate_update("someone-else", Role.STAFF, _profile(), {"fullName": "X", "mobile": "1"})

    assert [d.field for d in decisions] == ["full_name", "mobile"]
    assert all(d.reason == DENY_NOT_OWNER for d in decisions)


def test_admin_batch_on_other_profile_uses_field_rules():
    profile = _profile(latitude=1.0, longitude=2.0)
    decisions = evaluate_update("admin-1", Role.ADMIN, profile, {"jobTitle": "Lead", "latitude": 100})

    assert decisions[0].allowed
    assert decisions[1].reason == "Invalid latitude"


def test_owner_batch_mixes_allow_and_deny():
    decisions = evaluate_update("u-staff", Role.STAFF, _profile(), {"fullName": "Ahmed", "bonus": "1000"})

    assert decisions[0].allowed
    assert decisions[1].reason == DENY_ADMIN_ONLY


def test_ownership_with_plain_mapping_profile():
    decisions = evaluate_update("u-1", "STAFF", {"id": "u-1"}, {"mobile": "123"})
    assert decisions[0].allowed
