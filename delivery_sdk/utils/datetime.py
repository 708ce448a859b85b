"""Datetime helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def compact_timestamp(moment: datetime) -> str:
    """Format a datetime as ``yyyymmddHHMMss`` (14 digits)."""
    return moment.strftime("%Y%m%d%H%M%S")
