"""Datetime utility functions."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from app.config import settings

# Portal timezone (from config): API responses and numbering buckets
API_TIMEZONE = ZoneInfo(settings.timezone)


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def to_api_timezone(dt: datetime | None) -> datetime | None:
    """Convert a datetime to the portal timezone.

    Naive datetimes are assumed to be UTC (SQLite drops tzinfo on read).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(API_TIMEZONE)
