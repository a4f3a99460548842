from __future__ import annotations

import logging
from typing import Optional

from ..bookings.repository import BookingRepository
from ..core.constants import DEFAULT_STATISTICS_LIMIT
from ..core.exceptions import UpstreamFetchError
from ..projects.repository import ProjectRepository
from ..users.repository import PersonRepository
from .aggregator import BookingStatisticsAggregator
from .model import StatisticsResult

logger = logging.getLogger(__name__)


class StatisticsService:
    """Use case: fetch bookings, persons and projects, then aggregate them.

    The three fetches are independent; aggregation runs once all of them returned.
    Failures are not retried.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        persons: PersonRepository,
        projects: ProjectRepository,
        *,
        aggregator: Optional[BookingStatisticsAggregator] = None,
        limit: int = DEFAULT_STATISTICS_LIMIT,
    ):
        self._bookings = bookings
        self._persons = persons
        self._projects = projects
        self._aggregator = aggregator or BookingStatisticsAggregator()
        self._limit = int(limit)

    def calculate(self) -> StatisticsResult:
        logger.info("Calculating booking statistics (limit=%s)", self._limit)
        try:
            page = self._bookings.list_all(offset=0, limit=self._limit)
        except Exception as e:
            raise UpstreamFetchError("Cannot fetch bookings") from e
        try:
            persons_by_id = {p.person_id: p for p in self._persons.list_all()}
        except Exception as e:
            raise UpstreamFetchError("Cannot fetch persons") from e
        try:
            projects_by_id = {p.project_id: p for p in self._projects.list_all()}
        except Exception as e:
            raise UpstreamFetchError("Cannot fetch projects") from e

        result = self._aggregator.aggregate(page.data, persons_by_id, projects_by_id)
        logger.info("Booking statistics calculated over %s entries", result.total_entries)
        return result
