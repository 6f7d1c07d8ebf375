from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import AttendanceSession
from .repository import AttendanceRepository

_COLUMNS = "session_id, user_id, login_at, logout_at, duration_min, source, ip, user_agent"


def _row_to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=str(r["session_id"]),
        user_id=str(r["user_id"]),
        login_at=r["login_at"],
        logout_at=r.get("logout_at"),
        duration_min=int(r["duration_min"]) if r.get("duration_min") is not None else None,
        source=r.get("source") or "",
        ip=r.get("ip"),
        user_agent=r.get("user_agent"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_open_for_user(self, user_id: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE user_id=%s AND logout_at IS NULL
                ORDER BY login_at DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def create_session(
        self,
        *,
        user_id: str,
        login_at: datetime,
        source: str,
        ip: Optional[str],
        user_agent: Optional[str],
    ) -> AttendanceSession:
        session_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(session_id, user_id, login_at, source, ip, user_agent)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (session_id, user_id, login_at, source, ip, user_agent),
            )
        return AttendanceSession(
            session_id=session_id,
            user_id=user_id,
            login_at=login_at,
            source=source,
            ip=ip,
            user_agent=user_agent,
        )

    def close_session(self, session_id: str, *, logout_at: datetime, duration_min: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET logout_at=%s, duration_min=%s
                WHERE session_id=%s AND logout_at IS NULL
                """,
                (logout_at, int(duration_min), session_id),
            )
            return cur.rowcount > 0

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE user_id=%s
                ORDER BY login_at DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_row_to_session(r) for r in fetchall(cur)]
