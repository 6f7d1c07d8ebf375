from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none

SOURCE_MANUAL_BUTTON = "MANUAL_BUTTON"


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one check-in/check-out span of a user."""

    session_id: str
    user_id: str
    login_at: datetime
    logout_at: Optional[datetime] = None
    duration_min: Optional[int] = None
    source: str = SOURCE_MANUAL_BUTTON
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.logout_at is None


def session_to_dict(s: AttendanceSession) -> dict:
    return {
        "sessionId": s.session_id,
        "loginAt": isoformat_or_none(s.login_at),
        "logoutAt": isoformat_or_none(s.logout_at),
        "durationMin": s.duration_min,
        "source": s.source,
    }
