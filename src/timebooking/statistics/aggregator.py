"""Booking statistics: worked hours grouped by day, project and employee."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional

from ..bookings.model import Booking
from ..common.datetime_utils import format_short_date, now_local, to_epoch_millis
from ..core.exceptions import MissingReferenceError
from ..projects.model import Project
from ..users.model import Person
from .model import LabelSeries, StatisticsResult


def work_time_hours(booking: Booking) -> int:
    """Whole hours worked: (finished - started) - pause, fractional hour discarded."""
    return int(booking.worked.total_seconds() // 3600)


class BookingStatisticsAggregator:
    """Pure transformation of one booking list into three label/value series.

    Each call builds its own accumulators; instances hold no per-request state.
    """

    def __init__(self, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock

    def aggregate(
        self,
        bookings: Iterable[Booking],
        persons_by_id: Mapping[int, Person],
        projects_by_id: Mapping[int, Project],
        *,
        now: Optional[datetime] = None,
    ) -> StatisticsResult:
        # dicts keep first-seen key order
        per_day: dict[str, int] = {}
        per_project: dict[str, int] = {}
        per_employee: dict[str, int] = {}
        total = 0

        for booking in bookings:
            total += 1
            hours = work_time_hours(booking)

            project = projects_by_id.get(booking.project_id)
            if project is None:
                raise MissingReferenceError("project", booking.project_id)
            person = persons_by_id.get(booking.person_id)
            if person is None:
                raise MissingReferenceError("person", booking.person_id)

            day = format_short_date(booking.work_day)
            per_day[day] = per_day.get(day, 0) + hours
            per_project[project.name] = per_project.get(project.name, 0) + hours
            per_employee[person.full_name] = per_employee.get(person.full_name, 0) + hours

        captured = now or self._clock()
        return StatisticsResult(
            timestamp=to_epoch_millis(captured),
            total_entries=total,
            # one chart series for the day view
            hours_day=LabelSeries(labels=list(per_day), data=[list(per_day.values())]),
            hours_project=LabelSeries(labels=list(per_project), data=list(per_project.values())),
            hours_employee=LabelSeries(labels=list(per_employee), data=list(per_employee.values())),
        )
