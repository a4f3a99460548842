from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Group, Person
from .repository import GroupRepository, PersonRepository


def _row_to_person(row: dict) -> Person:
    return Person(person_id=int(row["person_id"]), forename=row["forename"], surname=row["surname"])


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, forename, surname FROM persons WHERE person_id=%s", (person_id,))
            row = fetchone(cur)
            return _row_to_person(row) if row else None

    def list_all(self) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, forename, surname FROM persons ORDER BY surname, forename")
            return [_row_to_person(r) for r in fetchall(cur)]

    def update_person(self, person_id: int, *, forename: str, surname: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE persons SET forename=%s, surname=%s WHERE person_id=%s",
                (forename, surname, person_id),
            )


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id, name FROM user_groups WHERE group_id=%s", (group_id,))
            row = fetchone(cur)
            return Group(group_id=int(row["group_id"]), name=row["name"]) if row else None

    def list_all(self) -> Sequence[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id, name FROM user_groups ORDER BY name")
            return [Group(group_id=int(r["group_id"]), name=r["name"]) for r in fetchall(cur)]
