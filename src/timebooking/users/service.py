from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import GENERATED_PASSWORD_BYTES, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import Group, Person, User
from .repository import GroupRepository, PersonRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    uid: str
    person_id: Optional[int]
    groups: tuple[str, ...]

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(user_id=user.user_id, uid=user.uid, person_id=user.person_id, groups=tuple(user.groups))


def _password_matches(user: User, password: str) -> bool:
    if not isinstance(password, str):
        return False
    try:
        return check_password_hash(user.password_hash, password)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use cases: login, registration and session profile lookup."""

    def __init__(self, users: UserRepository, persons: PersonRepository):
        self._users = users
        self._persons = persons

    def authenticate(self, uid: str, password: str) -> SessionUser:
        logger.info("Start login process for %s", uid)
        user = self._users.get_by_uid(uid) if isinstance(uid, str) and uid else None
        if not user or not user.is_active:
            logger.info("User %s not found or inactive", uid)
            raise AuthenticationError("Wrong username or password")

        if not _password_matches(user, password):
            logger.info("User %s password wrong", uid)
            raise AuthenticationError("Wrong username or password")

        logger.info("User %s logged in", uid)
        return SessionUser.from_user(user)

    def register(self, *, uid: str, password: str, forename: str, surname: str) -> SessionUser:
        """Create a person profile plus a user account in the `user` group."""
        uid = require_non_empty(uid, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        forename = require_non_empty(forename, "Forename")
        surname = require_non_empty(surname, "Surname")

        logger.info("Start registration of user %s", uid)
        if self._users.get_by_uid(uid):
            raise ValidationError("Username already exist!")

        user_id = self._users.create_user_with_person(
            uid=uid,
            password_hash=generate_password_hash(password),
            forename=forename,
            surname=surname,
            group_name=Role.USER.value,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"Cannot find user with id {user_id}")
        return SessionUser.from_user(user)

    def resolve_user_person(self, user_id: int) -> tuple[User, Person]:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"Cannot find user with id {user_id}")
        person = self._persons.get_by_id(user.person_id) if user.person_id is not None else None
        if not person:
            raise NotFoundError(f"Cannot resolve person profile of user {user_id}")
        return user, person


class UserService:
    """Use cases: manage users (self service and admin)."""

    def __init__(self, users: UserRepository, persons: PersonRepository, groups: GroupRepository):
        self._users = users
        self._persons = persons
        self._groups = groups

    def _get_by_uid(self, uid: str) -> User:
        if not uid:
            raise ValidationError("Cannot find user with uid null")
        user = self._users.get_by_uid(uid)
        if not user:
            raise NotFoundError(f"Cannot find user {uid}")
        return user

    def username_exists(self, uid: str) -> bool:
        if not uid:
            raise ValidationError("Cannot find user with id null")
        return self._users.get_by_uid(uid) is not None

    def list_groups(self) -> Sequence[Group]:
        return self._groups.list_all()

    def list_users(self) -> list[dict]:
        """Users paired with their person profile: [{"user": ..., "person": ...}]."""
        out = []
        for user in self._users.list_all():
            person = self._persons.get_by_id(user.person_id) if user.person_id is not None else None
            if not person:
                raise NotFoundError(f"Cannot resolve person profile of user {user.user_id}")
            out.append({"user": user.to_dict(), "person": person.to_dict()})
        return out

    def update_user(self, *, current: SessionUser, uid: str, data: dict) -> dict:
        if not uid:
            raise ValidationError("Cannot update user. No userId found in request.")
        if not data:
            raise ValidationError("Cannot update user. No userData found in request.")
        if data.get("uid") != uid:
            raise ValidationError("Cannot update user. userData does not match with given id.")
        if current.uid != uid and Role.ADMIN.value not in current.groups:
            raise AuthorizationError("Updating of a user is allowed only for the user or an admin.")

        user = self._get_by_uid(uid)
        person = self._persons.get_by_id(user.person_id) if user.person_id is not None else None
        if not person:
            raise NotFoundError(f"Cannot resolve person profile of user {user.user_id}")

        person_data = data.get("person") or data
        forename = require_non_empty(person_data.get("forename", person.forename), "Forename")
        surname = require_non_empty(person_data.get("surname", person.surname), "Surname")
        self._persons.update_person(person.person_id, forename=forename, surname=surname)

        updated = Person(person_id=person.person_id, forename=forename, surname=surname)
        return {"user": user.to_dict(), "person": updated.to_dict()}

    def change_password(self, *, current: SessionUser, uid: str, old_password: str, new_password: str) -> bool:
        if current.uid != uid:
            raise AuthorizationError("Users may change only their own password.")
        user = self._get_by_uid(uid)
        if not _password_matches(user, old_password):
            raise ValidationError("Cannot change password. Old password is wrong.")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        return self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))

    def reset_password(self, uid: str) -> str:
        """Generate, store and return a new password; no old password needed."""
        user = self._get_by_uid(uid)
        new_password = secrets.token_urlsafe(GENERATED_PASSWORD_BYTES)
        if not self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password)):
            raise ValidationError(f"Cannot reset password of user {uid}")
        logger.info("Password of user %s was reset", uid)
        return new_password

    def change_group(self, uid: str, group_id: int) -> dict:
        user = self._get_by_uid(uid)
        group = self._groups.get_by_id(group_id)
        if not group:
            raise NotFoundError(f"Cannot find group with groupId {group_id}")
        if not self._users.replace_groups(user.user_id, group_id=group.group_id):
            raise ValidationError(f"Cannot change group of user {uid}")
        logger.info("User %s moved to group %s", uid, group.name)
        return {"uid": user.uid, "groups": [group.name]}
