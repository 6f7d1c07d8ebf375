from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, name, email, password_hash, role, department, is_active, last_login, created_at"
_UPDATABLE = frozenset({"name", "email", "role", "department", "is_active"})


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        is_active=bool(row.get("is_active", True)),
        last_login=row.get("last_login"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users"
        params: list = []
        if role is not None:
            sql += " WHERE role=%s"
            params.append(role.value)
        sql += " ORDER BY created_at DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
    ) -> str:
        user_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, name, email, password_hash, role, department, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (user_id, name, email, password_hash, role.value, department),
            )
        return user_id

    def update_user(self, user_id: str, changes: Mapping[str, Any]) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown user columns: {sorted(unknown)}")
        if not changes:
            return False

        names = list(changes)
        values = [changes[n].value if isinstance(changes[n], Role) else changes[n] for n in names]
        assignments = ", ".join(f"{n}=%s" for n in names)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {assignments} WHERE user_id=%s", tuple(values) + (user_id,))
            return cur.rowcount > 0

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, user_id))
            return cur.rowcount > 0

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, user_id))
            return cur.rowcount > 0

    def touch_last_login(self, user_id: str, when: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login=%s WHERE user_id=%s", (when, user_id))

    def list_directory(
        self,
        *,
        role: Optional[Role],
        search: Optional[str],
        exclude_id: Optional[str],
        limit: int,
    ) -> Sequence[dict]:
        where = ["u.is_active=1"]
        params: list = []
        if exclude_id:
            where.append("u.user_id<>%s")
            params.append(exclude_id)
        if role is not None:
            where.append("u.role=%s")
            params.append(role.value)
        if search:
            # utf8mb4_unicode_ci collation makes LIKE case-insensitive
            like = f"%{search}%"
            where.append("(u.name LIKE %s OR u.email LIKE %s OR p.job_title LIKE %s OR u.department LIKE %s)")
            params.extend([like, like, like, like])
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT u.user_id, u.name, u.email, u.role, u.department, u.is_active,
                       p.job_title, p.job_level, p.profile_image
                FROM users u
                LEFT JOIN profiles p ON p.user_id = u.user_id
                WHERE {" AND ".join(where)}
                ORDER BY u.role ASC, u.name ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                {
                    "id": r["user_id"],
                    "name": r["name"],
                    "email": r["email"],
                    "role": r["role"],
                    "department": r.get("department"),
                    "jobTitle": r.get("job_title"),
                    "jobLevel": r.get("job_level"),
                    "profileImage": r.get("profile_image"),
                    "isActive": bool(r.get("is_active", True)),
                }
                for r in fetchall(cur)
            ]

    def list_staff_with_counts(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.name, u.email, u.role, u.department, u.is_active, u.created_at,
                       (SELECT COUNT(*) FROM tasks t WHERE t.assigned_to = u.user_id) AS assigned_tasks,
                       (SELECT COUNT(*) FROM work_logs w WHERE w.user_id = u.user_id) AS work_logs
                FROM users u
                WHERE u.role IN ('STAFF', 'ADMIN')
                ORDER BY u.created_at DESC
                """
            )
            return [
                {
                    "id": r["user_id"],
                    "name": r["name"],
                    "email": r["email"],
                    "role": r["role"],
                    "department": r.get("department"),
                    "isActive": bool(r.get("is_active", True)),
                    "createdAt": r["created_at"].isoformat() if r.get("created_at") else None,
                    "assignedTasks": int(r.get("assigned_tasks") or 0),
                    "workLogs": int(r.get("work_logs") or 0),
                }
                for r in fetchall(cur)
            ]
