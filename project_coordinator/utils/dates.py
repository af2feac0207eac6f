"""
Timestamp helpers

All persisted timestamps are UTC with second precision so a document
written and read back compares equal.
"""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utcnow() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).strftime(TIMESTAMP_FORMAT)


def format_display(value: datetime) -> str:
    """Medium date with short time, e.g. 'Oct 18, 2026 at 14:05'."""
    value = ensure_utc(value)
    return f"{value:%b} {value.day}, {value:%Y} at {value:%H:%M}"


def format_date(value: datetime) -> str:
    """Medium date without time, e.g. 'Oct 18, 2026'."""
    value = ensure_utc(value)
    return f"{value:%b} {value.day}, {value:%Y}"


def format_day(value: datetime) -> str:
    """Weekday heading used by the daily activity breakdown."""
    return f"{value:%A, %b} {value.day}"
