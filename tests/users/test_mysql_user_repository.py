from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from timebooking.core.exceptions import ValidationError
from timebooking.users.mysql_user_repository import MySQLUserRepository


class ScriptedCursor:
    def __init__(self, fail_on: str = "", error: Exception = None, membership_rows: int = 1):
        self.fail_on = fail_on
        self.error = error
        self.membership_rows = membership_rows
        self.statements = []
        self.lastrowid = None
        self.rowcount = 0

    def execute(self, sql, params=None):
        self.statements.append(sql)
        if self.fail_on and self.fail_on in sql:
            raise self.error
        self.lastrowid = len(self.statements) + 40
        self.rowcount = self.membership_rows if "user_group_members" in sql else 1

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, cursor: ScriptedCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class ScriptedFactory:
    def __init__(self, cursor: ScriptedCursor):
        self.conn = ScriptedConnection(cursor)

    def connect(self, *, with_database=True):
        return self.conn


def _register(repo: MySQLUserRepository) -> int:
    return repo.create_user_with_person(
        uid="jdoe", password_hash="hash", forename="Jane", surname="Doe", group_name="user"
    )


def test_registration_writes_everything_in_one_transaction():
    cur = ScriptedCursor()
    factory = ScriptedFactory(cur)

    user_id = _register(MySQLUserRepository(factory))

    assert user_id == 42
    assert "INSERT INTO persons" in cur.statements[0]
    assert "INSERT INTO users" in cur.statements[1]
    assert "user_group_members" in cur.statements[2]
    assert factory.conn.committed and not factory.conn.rolled_back


def test_duplicate_uid_becomes_validation_error_and_rolls_back():
    dup = mysql.connector.IntegrityError(msg="Duplicate entry 'jdoe' for key 'uid'", errno=errorcode.ER_DUP_ENTRY)
    cur = ScriptedCursor(fail_on="INSERT INTO users", error=dup)
    factory = ScriptedFactory(cur)

    with pytest.raises(ValidationError, match="Username already exist!"):
        _register(MySQLUserRepository(factory))

    assert factory.conn.rolled_back and not factory.conn.committed


def test_other_integrity_errors_propagate():
    fk = mysql.connector.IntegrityError(msg="foreign key", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    factory = ScriptedFactory(ScriptedCursor(fail_on="INSERT INTO users", error=fk))

    with pytest.raises(mysql.connector.IntegrityError):
        _register(MySQLUserRepository(factory))

    assert factory.conn.rolled_back


def test_missing_group_row_rolls_back_registration():
    factory = ScriptedFactory(ScriptedCursor(membership_rows=0))

    with pytest.raises(RuntimeError, match="Missing user_groups row for user"):
        _register(MySQLUserRepository(factory))

    assert factory.conn.rolled_back and not factory.conn.committed
