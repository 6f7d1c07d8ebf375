from __future__ import annotations

from dataclasses import replace

import pytest
from werkzeug.security import generate_password_hash

from src.staffdesk.staffdesk.analytics.service import DashboardService
from src.staffdesk.staffdesk.attendance.service import AttendanceService
from src.staffdesk.staffdesk.container import Container
from src.staffdesk.staffdesk.core.enums import Role
from src.staffdesk.staffdesk.main import create_app
from src.staffdesk.staffdesk.profiles.model import ProfileRecord
from src.staffdesk.staffdesk.profiles.service import ProfileService
from src.staffdesk.staffdesk.tasks.service import TaskService
from src.staffdesk.staffdesk.users.model import User
from src.staffdesk.staffdesk.users.service import AuthService, UserService
from src.staffdesk.staffdesk.worklogs.service import WorkLogService


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        return self._by_id.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self._by_id.values() if u.email == email), None)

    def list_all(self, *, role=None):
        return [u for u in self._by_id.values() if role is None or u.role == role]

    def touch_last_login(self, user_id, when):
        pass


class InMemoryProfiles:
    def __init__(self, *profiles: ProfileRecord):
        self._by_id = {p.user_id: p for p in profiles}

    def get_by_user_id(self, user_id):
        return self._by_id.get(user_id)

    def create_for_user(self, *, user_id, full_name, contact_email):
        pass

    def update_fields(self, user_id, changes):
        self._by_id[user_id] = replace(self._by_id[user_id], **changes)
        return True


class EmptyStore:
    """Task and work-log store with no rows."""

    def list_all(self, **_):
        return []

    def list_for_user(self, user_id):
        return []


class BrokenProfiles(InMemoryProfiles):
    def get_by_user_id(self, user_id):
        raise RuntimeError("database is down")


def _user(user_id, email, password, role) -> User:
    return User(
        user_id=user_id,
        name=user_id.title(),
        email=email,
        password_hash=generate_password_hash(password),
        role=role,
    )


def _container(profiles) -> Container:
    users = InMemoryUsers(
        _user("admin", "admin@staffdesk.local", "admin123", Role.ADMIN),
        _user("staff", "staff@staffdesk.local", "staff123", Role.STAFF),
    )
    empty = EmptyStore()
    return Container(
        auth_service=AuthService(users),
        user_service=UserService(users, profiles),
        profile_service=ProfileService(profiles),
        task_service=TaskService(empty, users),
        worklog_service=WorkLogService(empty, empty),
        attendance_service=AttendanceService(empty, users),
        dashboard_service=DashboardService(empty, empty, users),
    )


def _profiles() -> InMemoryProfiles:
    return InMemoryProfiles(
        ProfileRecord(user_id="admin", role=Role.ADMIN, full_name="Admin"),
        ProfileRecord(user_id="staff", role=Role.STAFF, full_name="Staff", latitude=30.0, longitude=31.0),
    )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(_container(_profiles()))
    return app.test_client()


def _login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_and_me(client):
    assert _login(client, "staff@staffdesk.local", "nope").status_code == 401

    resp = _login(client, "staff@staffdesk.local", "staff123")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "STAFF"

    me = client.get("/api/auth/me")
    assert me.get_json()["user"]["id"] == "staff"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_profile_requires_login(client):
    assert client.get("/api/users/staff").status_code == 401


def test_staff_profile_update_reports_denied_fields(client):
    _login(client, "staff@staffdesk.local", "staff123")

    resp = client.put("/api/users/staff", json={"mobile": "0100", "jobTitle": "CTO", "latitude": 1.0})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["updatedFields"] == ["mobile"]
    assert body["deniedFields"] == [
        {"field": "jobTitle", "reason": "Forbidden: admin-only field"},
        {"field": "latitude", "reason": "Forbidden: coordinates locked"},
    ]
    assert body["user"]["mobile"] == "0100"
    assert body["completion"] == 9


def test_staff_cannot_touch_other_profiles(client):
    _login(client, "staff@staffdesk.local", "staff123")

    assert client.get("/api/users/admin").status_code == 403
    assert client.put("/api/users/admin", json={"fullName": "X"}).status_code == 403
    assert client.delete("/api/admin/users/staff/coordinates").status_code == 403
    assert client.get("/api/users/ghost").status_code == 403


def test_empty_update_is_bad_request(client):
    _login(client, "staff@staffdesk.local", "staff123")
    assert client.put("/api/users/staff", json={}).status_code == 400


def test_admin_resets_coordinates_and_sees_completion(client):
    _login(client, "admin@staffdesk.local", "admin123")

    resp = client.delete("/api/admin/users/staff/coordinates")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["latitude"] is None

    completion = client.get("/api/users/staff/completion").get_json()
    assert completion["percentage"] == 5
    assert completion["totalFields"] == 22

    assert client.get("/api/users/ghost").status_code == 404


def test_staff_dashboard_is_personal(client):
    _login(client, "staff@staffdesk.local", "staff123")

    body = client.get("/api/dashboard").get_json()
    assert body["role"] == "STAFF"
    assert body["stats"]["totalTasks"] == 0
    assert client.get("/api/admin/dashboard").status_code == 403


def test_unexpected_error_is_logged_and_hidden(monkeypatch, caplog):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(_container(BrokenProfiles()))
    client = app.test_client()
    _login(client, "staff@staffdesk.local", "staff123")

    resp = client.get("/api/users/staff")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Failed to fetch user"}
    assert "database is down" in caplog.text


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_non_text_work_log_title_is_bad_request(client):
    _login(client, "staff@staffdesk.local", "staff123")

    resp = client.post("/api/worklogs", json={"title": 12345, "summary": "Valid summary", "timeSpentMin": 30})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Title must be text"
