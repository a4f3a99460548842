from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group, Person, User


class UserRepository(Protocol):
    """Repository interface for users.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_uid(self, uid: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user_with_person(
        self, *, uid: str, password_hash: str, forename: str, surname: str, group_name: str
    ) -> int:
        """Create person, user and group membership as one unit; returns the new user id.

        Raises ValidationError when the uid is already taken.
        """
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def replace_groups(self, user_id: int, *, group_id: int) -> bool:
        raise NotImplementedError


class PersonRepository(Protocol):
    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Person]:
        raise NotImplementedError

    def update_person(self, person_id: int, *, forename: str, surname: str) -> None:
        raise NotImplementedError


class GroupRepository(Protocol):
    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Group]:
        raise NotImplementedError
