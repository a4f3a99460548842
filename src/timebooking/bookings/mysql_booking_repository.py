from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Booking, BookingPage
from .repository import BookingRepository

_COLUMNS = "booking_id, user_id, person_id, project_id, work_day, work_started, work_finished, pause"


def _row_to_booking(r: dict) -> Booking:
    return Booking(
        booking_id=int(r["booking_id"]),
        user_id=int(r["user_id"]),
        person_id=int(r["person_id"]),
        project_id=int(r["project_id"]),
        work_day=r["work_day"],
        work_started=r["work_started"],
        work_finished=r["work_finished"],
        pause=int(r.get("pause") or 0),
    )


class MySQLBookingRepository(BookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM bookings WHERE booking_id=%s", (booking_id,))
            r = fetchone(cur)
            return _row_to_booking(r) if r else None

    def list_all(self, *, offset: int, limit: int) -> BookingPage:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM bookings")
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM bookings
                ORDER BY work_day DESC, work_started DESC, booking_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            rows = fetchall(cur)
            return BookingPage(data=[_row_to_booking(r) for r in rows], offset=offset, limit=limit, total=total)

    def list_for_user(self, user_id: int) -> Sequence[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM bookings
                WHERE user_id=%s
                ORDER BY work_day DESC, work_started DESC
                """,
                (user_id,),
            )
            return [_row_to_booking(r) for r in fetchall(cur)]

    def create(self, booking: Booking) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO bookings(user_id, person_id, project_id, work_day, work_started, work_finished, pause)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    booking.user_id,
                    booking.person_id,
                    booking.project_id,
                    booking.work_day,
                    booking.work_started,
                    booking.work_finished,
                    booking.pause,
                ),
            )
            return int(cur.lastrowid)

    def update(self, booking: Booking) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE bookings
                SET person_id=%s, project_id=%s, work_day=%s, work_started=%s, work_finished=%s, pause=%s
                WHERE booking_id=%s AND user_id=%s
                """,
                (
                    booking.person_id,
                    booking.project_id,
                    booking.work_day,
                    booking.work_started,
                    booking.work_finished,
                    booking.pause,
                    booking.booking_id,
                    booking.user_id,
                ),
            )

    def delete_for_user(self, *, booking_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM bookings WHERE booking_id=%s AND user_id=%s", (booking_id, user_id))
            return cur.rowcount > 0
