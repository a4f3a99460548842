from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_SELECT_USERS = """
    SELECT u.user_id, u.uid, u.password_hash, u.person_id, u.is_active,
           GROUP_CONCAT(g.name ORDER BY g.name SEPARATOR ',') AS group_names
    FROM users u
    LEFT JOIN user_group_members m ON m.user_id = u.user_id
    LEFT JOIN user_groups g ON g.group_id = m.group_id
"""


def _row_to_user(row: dict) -> User:
    names = row.get("group_names") or ""
    return User(
        user_id=int(row["user_id"]),
        uid=row["uid"],
        password_hash=row["password_hash"],
        person_id=row.get("person_id"),
        groups=tuple(n for n in names.split(",") if n),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USERS + " WHERE u.user_id=%s GROUP BY u.user_id", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_uid(self, uid: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USERS + " WHERE u.uid=%s GROUP BY u.user_id", (uid,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USERS + " GROUP BY u.user_id ORDER BY u.uid")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user_with_person(
        self, *, uid: str, password_hash: str, forename: str, surname: str, group_name: str
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT INTO persons(forename, surname) VALUES(%s,%s)", (forename, surname))
                person_id = int(cur.lastrowid)
                cur.execute(
                    "INSERT INTO users(uid, password_hash, person_id, is_active) VALUES(%s,%s,%s,1)",
                    (uid, password_hash, person_id),
                )
                user_id = int(cur.lastrowid)
                cur.execute(
                    """
                    INSERT INTO user_group_members(user_id, group_id)
                    SELECT %s, group_id FROM user_groups WHERE name=%s
                    """,
                    (user_id, group_name),
                )
                if cur.rowcount < 1:
                    raise RuntimeError(f"Missing user_groups row for {group_name}, apply seed.sql first")
                return user_id
        except mysql.connector.IntegrityError as e:
            # lost a race against a concurrent registration of the same uid
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ValidationError("Username already exist!") from e
            raise

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, user_id))
            return cur.rowcount > 0

    def replace_groups(self, user_id: int, *, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_group_members WHERE user_id=%s", (user_id,))
            cur.execute(
                "INSERT INTO user_group_members(user_id, group_id) VALUES(%s,%s)",
                (user_id, group_id),
            )
            return cur.rowcount > 0
