from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchone
from .model import PROFILE_FIELD_NAMES, ProfileRecord
from .repository import ProfileRepository

_COLUMNS = tuple(name for name in PROFILE_FIELD_NAMES if name not in {"user_id", "role"})


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        columns = ", ".join(f"p.{c}" for c in _COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT u.user_id, u.role, {columns}
                FROM users u
                LEFT JOIN profiles p ON p.user_id = u.user_id
                WHERE u.user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

            values = {c: row.get(c) for c in _COLUMNS}
            values["latitude"] = as_float(values["latitude"])
            values["longitude"] = as_float(values["longitude"])
            return ProfileRecord(user_id=str(row["user_id"]), role=Role(row["role"]), **values)

    def create_for_user(self, *, user_id: str, full_name: Optional[str], contact_email: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO profiles (user_id, full_name, contact_email) VALUES (%s, %s, %s)",
                (user_id, full_name, contact_email),
            )

    def update_fields(self, user_id: str, changes: Mapping[str, Any]) -> bool:
        unknown = set(changes) - set(_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown profile columns: {sorted(unknown)}")
        if not changes:
            return False

        names = list(changes)
        assignments = ", ".join(f"{name}=%s" for name in names)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT IGNORE INTO profiles (user_id) VALUES (%s)", (user_id,))
            cur.execute(
                f"UPDATE profiles SET {assignments} WHERE user_id=%s",
                tuple(changes[n] for n in names) + (user_id,),
            )
            return True
