from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Person profile: the employee name bookings are attributed to."""

    person_id: int
    forename: str
    surname: str

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}"

    def to_dict(self) -> dict:
        return {"id": self.person_id, "forename": self.forename, "surname": self.surname}


@dataclass(frozen=True)
class Group:
    group_id: int
    name: str

    def to_dict(self) -> dict:
        return {"id": self.group_id, "name": self.name}


@dataclass(frozen=True)
class User:
    """Login account. `uid` is the login name (e.g. mmustermann), `user_id` the db id.

    Note: Plain data object, no DB access code in here.
    """

    user_id: int
    uid: str
    password_hash: str
    person_id: Optional[int]
    groups: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True

    def to_dict(self) -> dict:
        # password_hash never leaves the server
        return {
            "id": self.user_id,
            "uid": self.uid,
            "personId": self.person_id,
            "groups": list(self.groups),
            "isActive": self.is_active,
        }
