from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.staffdesk.staffdesk.database.bootstrap import apply_schema, ensure_demo_users, list_tables

EXPECTED_TABLES = (
    "users",
    "profiles",
    "tasks",
    "task_history",
    "task_notifications",
    "work_logs",
    "attendance_sessions",
)


def main(argv: list[str]) -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = set(list_tables(db_config))
    missing = [t for t in EXPECTED_TABLES if t not in tables]
    if missing:
        print(f"FAIL: {target} is missing tables: {', '.join(missing)}", file=sys.stderr)
        return 1

    if "--with-demo-users" in argv:
        ensure_demo_users(db_config)

    print(f"OK: staffdesk schema ready -> {target} (tables={len(tables)})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
