from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from src.staffdesk.staffdesk.core.enums import Role
from src.staffdesk.staffdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.staffdesk.staffdesk.users.model import User
from src.staffdesk.staffdesk.users.service import AuthService, UserService


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_id = {u.user_id: u for u in users}
        self._next_id = 1
        self.last_login: dict[str, object] = {}
        self.directory_calls: list[dict] = []

    def get_by_id(self, user_id) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_email(self, email) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def list_all(self, *, role=None):
        return [u for u in self._by_id.values() if role is None or u.role == role]

    def create_user(self, *, name, email, password_hash, role, department):
        user_id = f"new-{self._next_id}"
        self._next_id += 1
        self._by_id[user_id] = User(
            user_id=user_id, name=name, email=email, password_hash=password_hash, role=role, department=department
        )
        return user_id

    def update_user(self, user_id, changes):
        self._by_id[user_id] = replace(self._by_id[user_id], **changes)
        return True

    def set_active(self, user_id, *, is_active):
        self._by_id[user_id] = replace(self._by_id[user_id], is_active=is_active)
        return True

    def set_password_hash(self, user_id, password_hash):
        self._by_id[user_id] = replace(self._by_id[user_id], password_hash=password_hash)
        return True

    def touch_last_login(self, user_id, when):
        self.last_login[user_id] = when

    def list_directory(self, *, role, search, exclude_id, limit):
        self.directory_calls.append({"role": role, "search": search, "exclude_id": exclude_id, "limit": limit})
        return []

    def list_staff_with_counts(self):
        return [{"id": u.user_id, "assignedTasks": 0, "workLogs": 0} for u in self._by_id.values()]


class InMemoryProfiles:
    def __init__(self):
        self.created: list[dict] = []

    def create_for_user(self, *, user_id, full_name, contact_email):
        self.created.append({"user_id": user_id, "full_name": full_name, "contact_email": contact_email})


def _user(user_id, email, password, role, *, is_active=True) -> User:
    return User(
        user_id=user_id,
        name=user_id.title(),
        email=email,
        password_hash=generate_password_hash(password),
        role=role,
        department="Development",
        is_active=is_active,
    )


@pytest.fixture
def users():
    return InMemoryUsers(
        _user("admin", "admin@staffdesk.local", "admin123", Role.ADMIN),
        _user("staff", "staff@staffdesk.local", "staff123", Role.STAFF),
        _user("gone", "gone@staffdesk.local", "gone123", Role.STAFF, is_active=False),
    )


def test_authenticate_success_records_last_login(users):
    s_user = AuthService(users).authenticate("Staff@StaffDesk.local ", "staff123")

    assert s_user.user_id == "staff"
    assert s_user.role == Role.STAFF
    assert "staff" in users.last_login


@pytest.mark.parametrize(
    "email, password",
    [("staff@staffdesk.local", "wrong"), ("nobody@staffdesk.local", "x"), ("gone@staffdesk.local", "gone123")],
)
def test_authenticate_failures(users, email, password):
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate(email, password)


def test_authenticate_with_placeholder_hash(users):
    users.update_user("staff", {"password_hash": "CHANGE_ME"})
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("staff@staffdesk.local", "CHANGE_ME")


def test_create_account_creates_profile(users):
    profiles = InMemoryProfiles()
    svc = UserService(users, profiles)

    user_id = svc.create_account(
        current_role=Role.ADMIN,
        name=" New Client ",
        email="Client@Example.com",
        password="secret1",
        role="CLIENT",
        department="Sales",
    )

    created = users.get_by_id(user_id)
    assert created.email == "client@example.com"
    assert created.role == Role.CLIENT
    assert check_password_hash(created.password_hash, "secret1")
    assert profiles.created == [{"user_id": user_id, "full_name": "New Client", "contact_email": "client@example.com"}]


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"password": "123"}, "Password must be at least 6 characters"),
        ({"email": "staff@staffdesk.local"}, "User with this email already exists"),
        ({"role": "ADMIN"}, "Admin accounts cannot be created here"),
        ({"name": "  "}, "Name is required"),
        ({"email": "not-an-email"}, "Email is not a valid email address"),
    ],
)
def test_create_account_validation(users, kwargs, message):
    svc = UserService(users, InMemoryProfiles())
    params = {"name": "New", "email": "new@example.com", "password": "secret1", "role": "STAFF"}
    params.update(kwargs)

    with pytest.raises(ValidationError) as exc:
        svc.create_account(current_role=Role.ADMIN, **params)
    assert str(exc.value) == message


def test_create_account_requires_admin(users):
    svc = UserService(users, InMemoryProfiles())
    with pytest.raises(AuthorizationError):
        svc.create_account(current_role=Role.STAFF, name="X", email="x@example.com", password="secret1", role="STAFF")


def test_update_user_rechecks_email_uniqueness(users):
    svc = UserService(users, InMemoryProfiles())

    with pytest.raises(ValidationError):
        svc.update_user(current_role=Role.ADMIN, user_id="staff", email="admin@staffdesk.local")

    updated = svc.update_user(current_role=Role.ADMIN, user_id="staff", name="John", department="QA")
    assert updated.name == "John"
    assert updated.department == "QA"

    with pytest.raises(NotFoundError):
        svc.update_user(current_role=Role.ADMIN, user_id="nobody", name="X")


def test_deactivate_is_soft_and_not_self(users):
    svc = UserService(users, InMemoryProfiles())

    with pytest.raises(ValidationError):
        svc.deactivate_user(actor_id="admin", current_role=Role.ADMIN, user_id="admin")

    svc.deactivate_user(actor_id="admin", current_role=Role.ADMIN, user_id="staff")
    assert users.get_by_id("staff").is_active is False


def test_reset_and_change_password(users):
    svc = UserService(users, InMemoryProfiles())

    svc.reset_password(current_role=Role.ADMIN, user_id="staff", new_password="newpass1")
    assert check_password_hash(users.get_by_id("staff").password_hash, "newpass1")

    with pytest.raises(ValidationError):
        svc.change_password(actor_id="staff", user_id="staff", current_password="wrong", new_password="another1")
    with pytest.raises(AuthorizationError):
        svc.change_password(actor_id="admin", user_id="staff", current_password="newpass1", new_password="another1")

    svc.change_password(actor_id="staff", user_id="staff", current_password="newpass1", new_password="another1")
    assert check_password_hash(users.get_by_id("staff").password_hash, "another1")


def test_list_directory_normalizes_filters(users):
    svc = UserService(users, InMemoryProfiles())

    svc.list_directory(role="ALL", search="  john ", exclude_id="admin", limit=5000)
    svc.list_directory(role="staff")

    assert users.directory_calls[0] == {"role": None, "search": "john", "exclude_id": "admin", "limit": 200}
    assert users.directory_calls[1]["role"] == Role.STAFF
    assert users.directory_calls[1]["limit"] == 50

    with pytest.raises(ValidationError):
        svc.list_directory(role="MANAGER")
