from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession


class AttendanceRepository(Protocol):
    def get_open_for_user(self, user_id: str) -> Optional[AttendanceSession]:
        """Latest session of the user that has no logout yet."""

        raise NotImplementedError

    def create_session(
        self,
        *,
        user_id: str,
        login_at: datetime,
        source: str,
        ip: Optional[str],
        user_agent: Optional[str],
    ) -> AttendanceSession:
        raise NotImplementedError

    def close_session(self, session_id: str, *, logout_at: datetime, duration_min: int) -> bool:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError
