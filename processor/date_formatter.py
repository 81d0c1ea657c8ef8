"""Date formatting for upstream requests and calendar timestamps."""
from datetime import date, datetime
from typing import Optional

# Written in place of a timestamp that could not be parsed
INVALID_TIMESTAMP = "NaNNaNNaNTNaNNaN00"


def to_request_date(value: date) -> str:
    """
    Format a date as used in the schedule request path.

    Args:
        value: Date or datetime, formatted from its own local fields

    Returns:
        Date string in YYYY-MM-DD format
    """
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def to_event_timestamp(value: Optional[datetime]) -> str:
    """
    Format a datetime as an iCalendar local timestamp (YYYYMMDDTHHMM00).

    Seconds are always written as 00 and no zone suffix is added; the
    zone identifier travels in the TZID parameter. A missing value is
    rendered as INVALID_TIMESTAMP.
    """
    if value is None:
        return INVALID_TIMESTAMP
    return (
        f"{value.year:04d}{value.month:02d}{value.day:02d}"
        f"T{value.hour:02d}{value.minute:02d}00"
    )
