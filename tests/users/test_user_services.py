from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from timebooking.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from timebooking.users.model import User
from timebooking.users.service import AuthService, SessionUser, UserService

JDOE = SessionUser(user_id=2, uid="jdoe", person_id=2, groups=("user",))
ADMIN = SessionUser(user_id=1, uid="admin", person_id=1, groups=("admin",))


def test_auth_wrong_password_raises(users, persons):
    auth = AuthService(users, persons)

    with pytest.raises(AuthenticationError):
        auth.authenticate("jdoe", "wrong")
    with pytest.raises(AuthenticationError):
        auth.authenticate("nobody", "secret1")


def test_auth_rejects_inactive_and_corrupted_hash(users, persons):
    users.users[3] = User(user_id=3, uid="gone", password_hash="CHANGE_ME", person_id=2, groups=("user",))
    users.users[4] = User(
        user_id=4, uid="off", password_hash=users.users[2].password_hash, person_id=2, is_active=False
    )
    auth = AuthService(users, persons)

    with pytest.raises(AuthenticationError):
        auth.authenticate("gone", "CHANGE_ME")
    with pytest.raises(AuthenticationError):
        auth.authenticate("off", "secret1")


def test_auth_success_returns_session_user(users, persons):
    s_user = AuthService(users, persons).authenticate("jdoe", "secret1")

    assert s_user == JDOE


def test_register_creates_person_and_user(users, persons):
    auth = AuthService(users, persons)

    s_user = auth.register(uid="mmustermann", password="geheim1", forename="Max", surname="Mustermann")

    assert s_user.uid == "mmustermann"
    assert s_user.groups == ("user",)
    user, person = auth.resolve_user_person(s_user.user_id)
    assert person.full_name == "Max Mustermann"
    assert check_password_hash(user.password_hash, "geheim1")


def test_register_rejects_existing_username(users, persons):
    auth = AuthService(users, persons)

    with pytest.raises(ValidationError, match="Username already exist!"):
        auth.register(uid="jdoe", password="geheim1", forename="J", surname="D")


def test_register_concurrent_duplicate_leaves_no_person(users, persons, monkeypatch):
    auth = AuthService(users, persons)
    # the other registration commits between the uid check and the insert
    monkeypatch.setattr(users, "get_by_uid", lambda uid: None)

    with pytest.raises(ValidationError, match="Username already exist!"):
        auth.register(uid="jdoe", password="geheim1", forename="J", surname="D")

    assert sorted(persons.persons) == [1, 2]


def test_register_fails_without_user_group(users, persons, groups):
    del groups.groups[2]
    auth = AuthService(users, persons)

    with pytest.raises(RuntimeError):
        auth.register(uid="mmustermann", password="geheim1", forename="Max", surname="Mustermann")

    assert users.get_by_uid("mmustermann") is None


def test_resolve_user_person_missing_profile(users, persons):
    del persons.persons[2]

    with pytest.raises(NotFoundError, match="Cannot resolve person profile of user 2"):
        AuthService(users, persons).resolve_user_person(2)


def test_username_exists(users, persons, groups):
    svc = UserService(users, persons, groups)

    assert svc.username_exists("jdoe") is True
    assert svc.username_exists("nobody") is False
    with pytest.raises(ValidationError):
        svc.username_exists("")


def test_list_users_pairs_user_and_person(users, persons, groups):
    listed = UserService(users, persons, groups).list_users()

    assert [row["user"]["uid"] for row in listed] == ["admin", "jdoe"]
    assert listed[1]["person"] == {"id": 2, "forename": "Jane", "surname": "Doe"}
    assert "password_hash" not in listed[0]["user"]


def test_update_user_checks_uid_and_permission(users, persons, groups):
    svc = UserService(users, persons, groups)

    with pytest.raises(ValidationError):
        svc.update_user(current=JDOE, uid="jdoe", data={"uid": "admin", "forename": "X"})
    with pytest.raises(AuthorizationError):
        svc.update_user(current=JDOE, uid="admin", data={"uid": "admin", "forename": "X"})

    updated = svc.update_user(current=ADMIN, uid="jdoe", data={"uid": "jdoe", "person": {"forename": "Janet"}})
    assert updated["person"] == {"id": 2, "forename": "Janet", "surname": "Doe"}
    assert persons.get_by_id(2).forename == "Janet"


def test_change_password_requires_old_password_and_owner(users, persons, groups):
    svc = UserService(users, persons, groups)

    with pytest.raises(AuthorizationError):
        svc.change_password(current=ADMIN, uid="jdoe", old_password="secret1", new_password="newpass1")
    with pytest.raises(ValidationError):
        svc.change_password(current=JDOE, uid="jdoe", old_password="wrong", new_password="newpass1")
    with pytest.raises(ValidationError):
        svc.change_password(current=JDOE, uid="jdoe", old_password="secret1", new_password="short")

    assert svc.change_password(current=JDOE, uid="jdoe", old_password="secret1", new_password="newpass1")
    assert check_password_hash(users.get_by_uid("jdoe").password_hash, "newpass1")


def test_reset_password_returns_new_working_password(users, persons, groups):
    svc = UserService(users, persons, groups)

    new_password = svc.reset_password("jdoe")

    assert new_password
    assert check_password_hash(users.get_by_uid("jdoe").password_hash, new_password)
    with pytest.raises(NotFoundError):
        svc.reset_password("nobody")


def test_change_group_replaces_all_groups(users, persons, groups):
    svc = UserService(users, persons, groups)

    assert svc.change_group("jdoe", 1) == {"uid": "jdoe", "groups": ["admin"]}
    assert users.get_by_uid("jdoe").groups == ("admin",)
    with pytest.raises(NotFoundError):
        svc.change_group("jdoe", 42)
