"""UTC-everywhere time handling. Eliminates timezone bugs at the source."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def from_epoch(seconds: int | float) -> datetime:
    """Convert Unix epoch seconds (as issued in identity tokens) to UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_epoch(dt: datetime) -> int:
    """Convert an aware datetime to whole Unix epoch seconds."""
    return int(to_utc(dt).timestamp())
