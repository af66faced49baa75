"""Reservation deadline helpers.

The vendor reports `reservation_until` as ``YYYY-MM-DD HH:MM:SS`` in UTC and
`reservation_until_min` as the minutes left at the moment of reservation.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from ..errors import MalformedResponse

_VENDOR_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_reservation_until(value: str) -> datetime:
    try:
        parsed = datetime.strptime(value.strip(), _VENDOR_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise MalformedResponse(f"Unrecognized reservation deadline {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def time_left(reservation_until: str, now: datetime | None = None) -> timedelta:
    """Time until the reservation lapses, never negative."""
    now = now or datetime.now(UTC)
    return max(parse_reservation_until(reservation_until) - now, timedelta(0))


def is_expired(reservation_until: str, now: datetime | None = None) -> bool:
    return time_left(reservation_until, now) == timedelta(0)


def format_time_left(remaining: timedelta) -> str:
    """Render as ``MM:SS``; an elapsed deadline shows ``00:00``."""
    seconds = max(int(remaining.total_seconds()), 0)
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"
