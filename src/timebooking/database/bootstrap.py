"""Schema/seed helpers used by the application factory in development setups."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent
SCHEMA_PATH = SQL_DIR / "schema.sql"
SEED_PATH = SQL_DIR / "seed.sql"


def _strip_create_db_and_use(sql: str) -> str:
    # The configured database name wins over the one written in the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(conn_factory: DatabaseConnection, path: Path) -> None:
    sql = _strip_create_db_and_use(path.read_text(encoding="utf-8"))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Path = SCHEMA_PATH) -> None:
    ensure_database_exists(conn_factory)
    _run_script(conn_factory, Path(schema_path))
    logger.info("Schema applied from %s", schema_path)


def apply_seed_sql(conn_factory: DatabaseConnection, *, seed_path: Path = SEED_PATH) -> None:
    _run_script(conn_factory, Path(seed_path))
    logger.info("Seed data applied from %s", seed_path)


def ensure_demo_users(conn_factory: DatabaseConnection) -> None:
    """Create (or reset) the demo admin account `admin` / `admin123`."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT group_id FROM user_groups WHERE name=%s", (Role.ADMIN.value,))
        group = cur.fetchone()
        if not group:
            raise RuntimeError("Missing user_groups row for admin, apply seed.sql first")

        password_hash = generate_password_hash("admin123")
        cur.execute("SELECT user_id FROM users WHERE uid=%s", ("admin",))
        existing = cur.fetchone()
        if existing:
            user_id = int(existing["user_id"])
            cur.execute("UPDATE users SET password_hash=%s, is_active=1 WHERE user_id=%s", (password_hash, user_id))
        else:
            cur.execute("INSERT INTO persons (forename, surname) VALUES (%s, %s)", ("Admin", "Demo"))
            person_id = int(cur.lastrowid)
            cur.execute(
                "INSERT INTO users (uid, password_hash, person_id) VALUES (%s, %s, %s)",
                ("admin", password_hash, person_id),
            )
            user_id = int(cur.lastrowid)

        cur.execute(
            "INSERT IGNORE INTO user_group_members (user_id, group_id) VALUES (%s, %s)",
            (user_id, int(group["group_id"])),
        )
        conn.commit()
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
