"""DateTime utilities for calendar report processing.

Provides the calendar-day truncation used for override and exception
lookups, timezone normalization for parsed iCalendar values and the
formatting used in report rows.
"""

import logging
from datetime import UTC, date, datetime, time, tzinfo
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Calendar-day lookup key for overrides and exceptions
CalendarDay = date

START_FORMAT = "%Y-%m-%d %H:%M"

DateLike = Union[str, date, datetime]


def ensure_timezone_aware(dt: datetime, default_tz: Optional[tzinfo] = None) -> datetime:
    """Ensure datetime is timezone-aware.

    Args:
        dt: Datetime to make timezone-aware
        default_tz: Zone attached to naive values (UTC when omitted)

    Returns:
        Timezone-aware datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=default_tz or UTC)
    return dt


def to_datetime(value: Union[date, datetime], default_tz: Optional[tzinfo] = None) -> datetime:
    """Convert a date or datetime into an aware datetime.

    Date-only values (all-day events) become midnight in ``default_tz``.
    """
    if isinstance(value, datetime):
        return ensure_timezone_aware(value, default_tz)
    return datetime.combine(value, time.min, tzinfo=default_tz or UTC)


def calendar_day(value: Any) -> CalendarDay:
    """Truncate a point in time to its calendar-day lookup key.

    Aware datetimes are converted to UTC before the date part is taken, so a
    rule-generated instant and the RECURRENCE-ID / EXDATE naming the same
    instance always produce the same key regardless of their zones. Naive
    datetimes use their own date part and dates pass through unchanged.
    ISO 8601 strings are parsed first.

    Args:
        value: datetime, date or ISO 8601 string

    Returns:
        The calendar day used as override/exception key

    Raises:
        ValueError: If a string value is not ISO 8601
        TypeError: If the value is of an unsupported type
    """
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot derive a calendar day from {type(value).__name__}")


def day_start_utc(day: CalendarDay) -> datetime:
    """Return midnight UTC of a calendar day."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up an IANA timezone name, defaulting to UTC.

    Raises:
        ValueError: If the name is not a known timezone
    """
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def parse_datetime_value(value: DateLike, default_tz: Optional[tzinfo] = None) -> datetime:
    """Parse a configuration date/datetime value into an aware datetime.

    Accepts datetime and date objects (as produced by YAML loaders) as well
    as free-form strings understood by dateutil.

    Raises:
        ValueError: If a string value cannot be parsed
    """
    if isinstance(value, (datetime, date)):
        return to_datetime(value, default_tz)
    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date value: {value!r}") from e
    return ensure_timezone_aware(parsed, default_tz)


def format_start(dt: datetime, target_tz: Optional[tzinfo] = None) -> str:
    """Format an occurrence start for report output (``YYYY-MM-DD HH:MM``)."""
    if target_tz is not None:
        dt = ensure_timezone_aware(dt).astimezone(target_tz)
    return dt.strftime(START_FORMAT)


def milliseconds_between(start: Optional[datetime], end: Optional[datetime]) -> float:
    """Return ``end - start`` in milliseconds, or 0 when either bound is missing."""
    if start is None or end is None:
        return 0.0
    return (end - start).total_seconds() * 1000
