from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_field(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")
    try:
        if len(value) == 10:
            return parse_iso_date(value)
        # full timestamps are accepted too, only the calendar day is kept
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_timestamp_field(value: Any, field_name: str) -> datetime:
    """Accept ISO-8601 strings or epoch milliseconds.

    Timestamps are handled as naive local datetimes (the MySQL DATETIME columns carry no zone).
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            raise ValidationError(f"{field_name} is out of range")
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp or epoch milliseconds")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_short_date(value: date) -> str:
    """Short US style date without padding, e.g. 3/3/2000."""
    return f"{value.month}/{value.day}/{value.year}"


def to_epoch_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.astimezone()
    return int(value.astimezone(timezone.utc).timestamp() * 1000)


def now_local() -> datetime:
    """Current local time; the default clock of the statistics aggregator."""
    return datetime.now()
