"""Timestamp helpers.

The Cassandra driver returns naive datetimes that are implicitly UTC, while
entities created in-process are timezone-aware. Everything that compares or
serializes timestamps goes through ``ensure_utc`` first.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
