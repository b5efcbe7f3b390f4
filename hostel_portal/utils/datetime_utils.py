"""
Date and time helpers shared by the lifecycle services.

All timestamps handled by the service are timezone-aware UTC datetimes and
are stored as ISO-8601 strings.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from dateutil import parser

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-like string (``Z`` suffix included) into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(parser.isoparse(value))


def to_iso(value: datetime) -> str:
    return ensure_utc(value).isoformat()


def add_hours(value: datetime, hours: float) -> datetime:
    return value + timedelta(hours=hours)


def add_days(value: datetime, days: float) -> datetime:
    return value + timedelta(days=days)


def format_time_remaining(start: datetime, end: datetime) -> str:
    """
    Format the gap between two instants as ``"{d}d {h}h {m}m {s}s"``.

    Returns ``"0d 0h 0m 0s"`` when ``end`` is not after ``start``.
    """
    seconds = int((end - start).total_seconds())
    if seconds <= 0:
        return "0d 0h 0m 0s"
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"
