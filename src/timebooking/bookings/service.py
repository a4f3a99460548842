from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_date_field, parse_timestamp_field
from ..common.validators import optional_int, require_int, require_payload
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..projects.repository import ProjectRepository
from .model import Booking, BookingPage
from .repository import BookingRepository

logger = logging.getLogger(__name__)


def validate_booking(booking: Booking) -> Booking:
    """Enforce work_finished >= work_started and 0 <= pause <= elapsed minutes."""
    if booking.work_finished < booking.work_started:
        raise ValidationError("workFinished must not be before workStarted")
    if booking.pause < 0:
        raise ValidationError("pause must not be negative")
    if timedelta(minutes=booking.pause) > booking.elapsed:
        raise ValidationError("pause must not be longer than the booked interval")
    return booking


class BookingService:
    """Use cases: booking CRUD for the session user, full listing for admins."""

    def __init__(self, bookings: BookingRepository, projects: Optional[ProjectRepository] = None):
        self._bookings = bookings
        self._projects = projects

    def _build(
        self,
        data: Any,
        *,
        booking_id: Optional[int],
        user_id: int,
        default_person_id: Optional[int],
    ) -> Booking:
        data = require_payload(data, "save booking")

        person_raw = data.get("personId", default_person_id)
        if person_raw is None:
            raise ValidationError("personId is required")
        if data.get("projectId") is None:
            raise ValidationError("projectId is required")
        for name in ("workDay", "workStarted", "workFinished"):
            if data.get(name) in (None, ""):
                raise ValidationError(f"{name} is required")

        booking = Booking(
            booking_id=booking_id,
            user_id=user_id,
            person_id=require_int(person_raw, "personId"),
            project_id=require_int(data.get("projectId"), "projectId"),
            work_day=parse_date_field(data.get("workDay"), "workDay"),
            work_started=parse_timestamp_field(data.get("workStarted"), "workStarted"),
            work_finished=parse_timestamp_field(data.get("workFinished"), "workFinished"),
            pause=optional_int(data.get("pause"), "pause", default=0),
        )
        validate_booking(booking)

        if self._projects is not None and self._projects.get_by_id(booking.project_id) is None:
            raise ValidationError(f"Unknown project {booking.project_id}")
        return booking

    def list_user_bookings(self, user_id: int) -> Sequence[Booking]:
        logger.info("Listing of all bookings of user with id %s", user_id)
        return self._bookings.list_for_user(user_id)

    def list_bookings(self, *, offset: Any = None, limit: Any = None) -> BookingPage:
        offset_i = optional_int(offset, "offset", default=0)
        limit_i = optional_int(limit, "limit", default=DEFAULT_PAGE_LIMIT)
        if offset_i < 0:
            raise ValidationError("offset must not be negative")
        if not 0 < limit_i <= MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
        logger.info("Listing of all bookings (offset=%s, limit=%s)", offset_i, limit_i)
        return self._bookings.list_all(offset=offset_i, limit=limit_i)

    def create_booking(self, *, user_id: int, person_id: Optional[int], data: Any) -> Booking:
        logger.info("Creating of a new booking for user %s", user_id)
        booking = self._build(data, booking_id=None, user_id=user_id, default_person_id=person_id)
        new_id = self._bookings.create(booking)
        return Booking(
            booking_id=new_id,
            user_id=booking.user_id,
            person_id=booking.person_id,
            project_id=booking.project_id,
            work_day=booking.work_day,
            work_started=booking.work_started,
            work_finished=booking.work_finished,
            pause=booking.pause,
        )

    def save_booking(self, *, user_id: int, booking_id: Any, data: Any) -> Booking:
        if booking_id in (None, ""):
            raise ValidationError("Cannot save booking. No bookingId found in request.")
        booking_id = require_int(booking_id, "bookingId")
        logger.info("Updating of an existing booking with id %s for user %s", booking_id, user_id)

        data = require_payload(data, "save booking")
        body_user = data.get("userId")
        if body_user is not None and require_int(body_user, "userId") != user_id:
            raise AuthorizationError("Updating of booking is allowed only for the owner of the booking.")

        existing = self._bookings.get_by_id(booking_id)
        if not existing:
            raise NotFoundError(f"Cannot find booking with id {booking_id}")
        if existing.user_id != user_id:
            raise AuthorizationError("Updating of booking is allowed only for the owner of the booking.")

        booking = self._build(data, booking_id=booking_id, user_id=user_id, default_person_id=existing.person_id)
        self._bookings.update(booking)
        return booking

    def delete_booking(self, *, user_id: int, booking_id: Any) -> dict:
        if booking_id in (None, ""):
            raise ValidationError("Cannot delete booking. No bookingId found in request.")
        booking_id = require_int(booking_id, "bookingId")
        logger.info("Deleting of an existing booking with id %s for user %s", booking_id, user_id)

        if not self._bookings.delete_for_user(booking_id=booking_id, user_id=user_id):
            raise NotFoundError(f"Cannot find booking {booking_id} of user {user_id}")
        return {"id": booking_id, "deleted": True}
