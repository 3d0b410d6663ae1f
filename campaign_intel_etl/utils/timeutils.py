"""Timezone helpers."""

from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """
    Return an aware UTC datetime.

    Naive values (e.g. read back from SQLite) are assumed to already be UTC.

    Args:
        value: Datetime, naive or aware

    Returns:
        Timezone-aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
