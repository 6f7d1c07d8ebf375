from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .model import SOURCE_MANUAL_BUTTON, AttendanceSession
from .repository import AttendanceRepository


def session_minutes(login_at: datetime, logout_at: datetime) -> int:
    """Whole minutes between check-in and check-out, rounded up, at least 1."""
    seconds = (logout_at - login_at).total_seconds()
    return max(1, math.ceil(seconds / 60.0))


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def check_in(
        self,
        user_id: str,
        *,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceSession:
        """Open a session, or return the one already open."""
        now = now or datetime.now()

        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("User not found")

        existing = self._attendance.get_open_for_user(user_id)
        if existing:
            return existing

        return self._attendance.create_session(
            user_id=user_id,
            login_at=now,
            source=SOURCE_MANUAL_BUTTON,
            ip=ip,
            user_agent=(user_agent or "")[:255] or None,
        )

    def check_out(self, user_id: str, *, now: datetime | None = None) -> AttendanceSession | None:
        now = now or datetime.now()

        open_session = self._attendance.get_open_for_user(user_id)
        if not open_session:
            return None

        minutes = session_minutes(open_session.login_at, now)
        self._attendance.close_session(open_session.session_id, logout_at=now, duration_min=minutes)
        return replace(open_session, logout_at=now, duration_min=minutes)

    def recent_for_user(self, user_id: str, limit: int = 30) -> Sequence[AttendanceSession]:
        return self._attendance.get_recent_for_user(user_id, max(1, int(limit)))
