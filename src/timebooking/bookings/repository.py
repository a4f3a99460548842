from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Booking, BookingPage


class BookingRepository(Protocol):
    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        raise NotImplementedError

    def list_all(self, *, offset: int, limit: int) -> BookingPage:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Booking]:
        raise NotImplementedError

    def create(self, booking: Booking) -> int:
        raise NotImplementedError

    def update(self, booking: Booking) -> None:
        raise NotImplementedError

    def delete_for_user(self, *, booking_id: int, user_id: int) -> bool:
        """Delete only when the booking belongs to `user_id`."""

        raise NotImplementedError
