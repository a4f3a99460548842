from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class Booking:
    """A recorded work interval of one person on one project on one day.

    `pause` is in minutes and is not part of the worked time.
    """

    booking_id: Optional[int]
    user_id: int
    person_id: int
    project_id: int
    work_day: date
    work_started: datetime
    work_finished: datetime
    pause: int = 0

    @property
    def elapsed(self) -> timedelta:
        return self.work_finished - self.work_started

    @property
    def worked(self) -> timedelta:
        return self.elapsed - timedelta(minutes=self.pause)

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "userId": self.user_id,
            "personId": self.person_id,
            "projectId": self.project_id,
            "workDay": self.work_day.isoformat(),
            "workStarted": self.work_started.isoformat(),
            "workFinished": self.work_finished.isoformat(),
            "pause": self.pause,
        }


@dataclass(frozen=True)
class BookingPage:
    data: list[Booking] = field(default_factory=list)
    offset: int = 0
    limit: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "data": [b.to_dict() for b in self.data],
            "offset": self.offset,
            "limit": self.limit,
            "total": self.total,
        }
