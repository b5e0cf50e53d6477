"""
UTC datetime utilities for consistent timezone handling.

Order dates are stored and returned as timezone-aware UTC values; cached
order payloads carry them as ISO 8601 strings with the offset included.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Used as the client-side default for Order.order_date.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime read from the database to aware UTC.

    Drivers without timezone support return naive values; those are
    assumed to be UTC already.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
