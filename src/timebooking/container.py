from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .bookings.mysql_booking_repository import MySQLBookingRepository
from .bookings.repository import BookingRepository
from .bookings.service import BookingService
from .database.connection import DBConfig, DatabaseConnection
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .statistics.service import StatisticsService
from .users.mysql_person_repository import MySQLGroupRepository, MySQLPersonRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import GroupRepository, PersonRepository, UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    persons_repo: PersonRepository
    groups_repo: GroupRepository
    projects_repo: ProjectRepository
    bookings_repo: BookingRepository

    auth_service: AuthService
    user_service: UserService
    booking_service: BookingService
    statistics_service: StatisticsService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    users_repo: UserRepository,
    persons_repo: PersonRepository,
    groups_repo: GroupRepository,
    projects_repo: ProjectRepository,
    bookings_repo: BookingRepository,
    statistics_limit: Optional[int] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of the given repositories."""
    statistics_kwargs = {} if statistics_limit is None else {"limit": statistics_limit}
    return Container(
        users_repo=users_repo,
        persons_repo=persons_repo,
        groups_repo=groups_repo,
        projects_repo=projects_repo,
        bookings_repo=bookings_repo,
        auth_service=AuthService(users_repo, persons_repo),
        user_service=UserService(users_repo, persons_repo, groups_repo),
        booking_service=BookingService(bookings_repo, projects_repo),
        statistics_service=StatisticsService(bookings_repo, persons_repo, projects_repo, **statistics_kwargs),
        conn=conn,
    )


def build_container(*, db_config: dict, statistics_limit: Optional[int] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return wire(
        users_repo=MySQLUserRepository(conn),
        persons_repo=MySQLPersonRepository(conn),
        groups_repo=MySQLGroupRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        bookings_repo=MySQLBookingRepository(conn),
        statistics_limit=statistics_limit,
        conn=conn,
    )
