"""Timestamp helpers shared by the calendar sync functions.

Calendar rows store UTC ISO-8601 strings with millisecond precision and a
trailing ``Z`` (``2024-01-15T00:00:00.000Z``). Date-only inputs are read as
UTC midnight.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

DEFAULT_EVENT_DURATION = timedelta(hours=1)

TimestampInput = str | datetime | date


def parse_timestamp(value: TimestampInput) -> datetime:
    """Parse a date, datetime or ISO string into an aware UTC datetime.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_iso(value: TimestampInput) -> str:
    return format_timestamp(parse_timestamp(value))


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def default_end_time(start_time: TimestampInput) -> str:
    """End time used when none was given: one hour after ``start_time``."""
    return format_timestamp(parse_timestamp(start_time) + DEFAULT_EVENT_DURATION)


def date_part(timestamp: TimestampInput) -> str:
    """UTC calendar date (YYYY-MM-DD) of a timestamp."""
    return parse_timestamp(timestamp).strftime("%Y-%m-%d")


def format_amount(amount: float | int) -> str:
    """Render an amount without a trailing ``.0`` (``40`` not ``40.0``)."""
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)
