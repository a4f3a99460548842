"""Shared pytest fixtures: in-memory repositories and a Flask app wired on top of them."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from timebooking import create_app
from timebooking.bookings.model import Booking, BookingPage
from timebooking.container import wire
from timebooking.core.exceptions import ValidationError
from timebooking.projects.model import Project
from timebooking.users.model import Group, Person, User

FAST_HASH = "pbkdf2:sha256:1000"


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=FAST_HASH)


class InMemoryPersons:
    def __init__(self, persons=()):
        self.persons: dict[int, Person] = {p.person_id: p for p in persons}
        self.fail = False

    def get_by_id(self, person_id: int) -> Optional[Person]:
        return self.persons.get(person_id)

    def list_all(self):
        if self.fail:
            raise ConnectionError("persons store down")
        return list(self.persons.values())

    def update_person(self, person_id: int, *, forename: str, surname: str) -> None:
        self.persons[person_id] = Person(person_id=person_id, forename=forename, surname=surname)


class InMemoryGroups:
    def __init__(self, groups=()):
        self.groups: dict[int, Group] = {g.group_id: g for g in groups}

    def get_by_id(self, group_id: int) -> Optional[Group]:
        return self.groups.get(group_id)

    def list_all(self):
        return list(self.groups.values())


class InMemoryUsers:
    def __init__(self, groups: InMemoryGroups, persons: InMemoryPersons, users=()):
        self._groups = groups
        self._persons = persons
        self.users: dict[int, User] = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_uid(self, uid: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.uid == uid), None)

    def list_all(self):
        return sorted(self.users.values(), key=lambda u: u.uid)

    def create_user_with_person(
        self, *, uid: str, password_hash: str, forename: str, surname: str, group_name: str
    ) -> int:
        if any(u.uid == uid for u in self.users.values()):
            raise ValidationError("Username already exist!")
        if not any(g.name == group_name for g in self._groups.list_all()):
            raise RuntimeError(f"Missing user_groups row for {group_name}, apply seed.sql first")
        person_id = max(self._persons.persons, default=0) + 1
        self._persons.persons[person_id] = Person(person_id=person_id, forename=forename, surname=surname)
        user_id = max(self.users, default=0) + 1
        self.users[user_id] = User(
            user_id=user_id,
            uid=uid,
            password_hash=password_hash,
            person_id=person_id,
            groups=(group_name,),
        )
        return user_id

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, password_hash=password_hash)
        return True

    def replace_groups(self, user_id: int, *, group_id: int) -> bool:
        user = self.users.get(user_id)
        group = self._groups.get_by_id(group_id)
        if not user or not group:
            return False
        self.users[user_id] = replace(user, groups=(group.name,))
        return True


class InMemoryProjects:
    def __init__(self, projects=()):
        self.projects: dict[int, Project] = {p.project_id: p for p in projects}
        self.fail = False

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self.projects.get(project_id)

    def list_all(self):
        if self.fail:
            raise ConnectionError("projects store down")
        return list(self.projects.values())


class InMemoryBookings:
    def __init__(self, bookings=()):
        self.bookings: dict[int, Booking] = {b.booking_id: b for b in bookings}
        self.fail = False
        self.last_page_args = None

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    def list_all(self, *, offset: int, limit: int) -> BookingPage:
        self.last_page_args = {"offset": offset, "limit": limit}
        if self.fail:
            raise ConnectionError("bookings store down")
        items = sorted(self.bookings.values(), key=lambda b: b.booking_id)
        return BookingPage(data=items[offset:offset + limit], offset=offset, limit=limit, total=len(items))

    def list_for_user(self, user_id: int):
        return [b for b in self.bookings.values() if b.user_id == user_id]

    def create(self, booking: Booking) -> int:
        booking_id = max(self.bookings, default=0) + 1
        self.bookings[booking_id] = replace(booking, booking_id=booking_id)
        return booking_id

    def update(self, booking: Booking) -> None:
        self.bookings[booking.booking_id] = booking

    def delete_for_user(self, *, booking_id: int, user_id: int) -> bool:
        booking = self.bookings.get(booking_id)
        if not booking or booking.user_id != user_id:
            return False
        del self.bookings[booking_id]
        return True


def make_booking(
    booking_id: int,
    *,
    user_id: int = 2,
    person_id: int = 2,
    project_id: int = 1,
    day: date = date(2020, 1, 1),
    start: tuple = (9, 0),
    end: tuple = (17, 0),
    pause: int = 60,
) -> Booking:
    return Booking(
        booking_id=booking_id,
        user_id=user_id,
        person_id=person_id,
        project_id=project_id,
        work_day=day,
        work_started=datetime(day.year, day.month, day.day, *start),
        work_finished=datetime(day.year, day.month, day.day, *end),
        pause=pause,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2020, 1, 2, 12, 0, 0)


@pytest.fixture
def groups():
    return InMemoryGroups([Group(group_id=1, name="admin"), Group(group_id=2, name="user")])


@pytest.fixture
def persons():
    return InMemoryPersons(
        [
            Person(person_id=1, forename="Admin", surname="Demo"),
            Person(person_id=2, forename="Jane", surname="Doe"),
        ]
    )


@pytest.fixture
def users(groups, persons):
    return InMemoryUsers(
        groups,
        persons,
        [
            User(user_id=1, uid="admin", password_hash=hash_password("admin123"), person_id=1, groups=("admin",)),
            User(user_id=2, uid="jdoe", password_hash=hash_password("secret1"), person_id=2, groups=("user",)),
        ],
    )


@pytest.fixture
def projects():
    return InMemoryProjects([Project(project_id=1, name="Alpha"), Project(project_id=2, name="Beta")])


@pytest.fixture
def bookings():
    return InMemoryBookings()


@pytest.fixture
def container(users, persons, groups, projects, bookings):
    return wire(
        users_repo=users,
        persons_repo=persons,
        groups_repo=groups,
        projects_repo=projects,
        bookings_repo=bookings,
    )


@pytest.fixture
def app(container):
    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(username: str = "jdoe", password: str = "secret1"):
        resp = client.post("/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login


@pytest.fixture
def booking_factory():
    return make_booking
