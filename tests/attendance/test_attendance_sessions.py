from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from src.staffdesk.staffdesk.attendance.model import AttendanceSession
from src.staffdesk.staffdesk.attendance.service import AttendanceService, session_minutes
from src.staffdesk.staffdesk.core.enums import Role
from src.staffdesk.staffdesk.core.exceptions import ValidationError
from src.staffdesk.staffdesk.users.model import User


class InMemoryUsers:
    def __init__(self, *user_ids):
        self._ids = set(user_ids)

    def get_by_id(self, user_id):
        if user_id not in self._ids:
            return None
        return User(user_id=user_id, name="John", email="j@x.io", password_hash="-", role=Role.STAFF)


class InMemoryAttendance:
    def __init__(self):
        self._sessions: list[AttendanceSession] = []

    def get_open_for_user(self, user_id):
        open_ = [s for s in self._sessions if s.user_id == user_id and s.logout_at is None]
        return max(open_, key=lambda s: s.login_at) if open_ else None

    def create_session(self, *, user_id, login_at, source, ip, user_agent):
        s = AttendanceSession(
            session_id=f"s-{len(self._sessions) + 1}",
            user_id=user_id,
            login_at=login_at,
            source=source,
            ip=ip,
            user_agent=user_agent,
        )
        self._sessions.append(s)
        return s

    def close_session(self, session_id, *, logout_at, duration_min):
        for i, s in enumerate(self._sessions):
            if s.session_id == session_id and s.logout_at is None:
                self._sessions[i] = replace(s, logout_at=logout_at, duration_min=duration_min)
                return True
        return False

    def get_recent_for_user(self, user_id, limit):
        rows = sorted((s for s in self._sessions if s.user_id == user_id), key=lambda s: s.login_at, reverse=True)
        return rows[:limit]


@pytest.fixture
def svc():
    return AttendanceService(InMemoryAttendance(), InMemoryUsers("staff"))


def test_check_in_is_idempotent(svc):
    t0 = datetime(2026, 3, 2, 9, 0)
    first = svc.check_in("staff", ip="10.0.0.1", user_agent="pytest", now=t0)
    second = svc.check_in("staff", now=t0 + timedelta(minutes=5))

    assert first.session_id == second.session_id
    assert second.login_at == t0
    assert first.ip == "10.0.0.1"


def test_check_in_unknown_user(svc):
    with pytest.raises(ValidationError):
        svc.check_in("ghost")


def test_check_out_rounds_up_minutes(svc):
    t0 = datetime(2026, 3, 2, 9, 0)
    svc.check_in("staff", now=t0)

    closed = svc.check_out("staff", now=t0 + timedelta(minutes=90, seconds=1))

    assert closed.duration_min == 91
    assert closed.logout_at == t0 + timedelta(minutes=90, seconds=1)
    assert svc.recent_for_user("staff")[0].duration_min == 91


def test_check_out_without_open_session_returns_none(svc):
    assert svc.check_out("staff") is None


def test_new_session_after_check_out(svc):
    t0 = datetime(2026, 3, 2, 9, 0)
    svc.check_in("staff", now=t0)
    svc.check_out("staff", now=t0 + timedelta(hours=1))
    again = svc.check_in("staff", now=t0 + timedelta(hours=2))

    assert again.session_id == "s-2"
    assert len(svc.recent_for_user("staff", limit=10)) == 2


@pytest.mark.parametrize(
    "delta, minutes",
    [(timedelta(seconds=0), 1), (timedelta(seconds=10), 1), (timedelta(minutes=1), 1), (timedelta(minutes=1, seconds=1), 2)],
)
def test_session_minutes_minimum_one(delta, minutes):
    start = datetime(2026, 3, 2, 9, 0)
    assert session_minutes(start, start + delta) == minutes
