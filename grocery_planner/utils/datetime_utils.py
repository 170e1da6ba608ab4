"""Timezone-aware UTC timestamps.

Timestamps are written as aware UTC datetimes (utc_now is the column
default). SQLite hands them back without tzinfo, so values read from the
store go through as_utc() before they are serialized.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to a naive datetime, or convert an aware one to UTC.

    Args:
        value: Datetime read from a model, or None

    Returns:
        Aware UTC datetime, or None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
