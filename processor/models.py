"""Data models for schedule processing."""
import enum
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, Mapping, Optional


class ScheduleParseError(ValueError):
    """Raised when an upstream schedule payload cannot be parsed."""


class ScopeFilter(enum.Flag):
    """Categories of schedule entries rendered into the calendar."""
    LESSONS = enum.auto()
    ASSESSMENTS = enum.auto()
    COMPLETE = LESSONS | ASSESSMENTS


@dataclass(frozen=True)
class Credentials:
    """Secret configuration for the school management API."""
    login: str
    password: str = field(repr=False)
    server_base_url: str
    student_number: str


@dataclass(frozen=True)
class RequestSpec:
    """Parameters of one upstream GET request."""
    url: str
    headers: Dict[str, str]


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an upstream ISO-8601 timestamp.

    Args:
        value: Raw value from the schedule JSON (or an already built datetime)
        tz: Calendar time zone; offset-aware timestamps are converted to it

    Returns:
        datetime, or None when the value is missing or not a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None and tz is not None:
        parsed = parsed.astimezone(tz)
    return parsed


@dataclass(frozen=True)
class ScheduleEntry:
    """
    One lesson or assessment from the weekly schedule.

    Timestamps are kept as received and only parsed when the entry is
    rendered, so entries outside the active scope are never inspected.
    """
    is_assessment: bool
    title: str
    start_time: Any
    end_time: Any

    @classmethod
    def from_json(cls, item: Any) -> 'ScheduleEntry':
        """
        Build an entry from one item of the upstream JSON array.

        Items are not validated: missing keys (or an item that is not an
        object at all) yield a lesson with an empty title and missing times.

        Args:
            item: Decoded JSON object (keys evento, descricao, horaInicio, horaTermo)

        Returns:
            ScheduleEntry
        """
        if not isinstance(item, dict):
            item = {}

        return cls(
            is_assessment=bool(item.get('evento')),
            title=str(item.get('descricao') or ''),
            start_time=item.get('horaInicio'),
            end_time=item.get('horaTermo')
        )


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the function environment."""
    number_of_weeks: int = 4
    timezone_id: str = 'Europe/Lisbon'
    timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> 'Settings':
        """
        Read NUMBER_OF_WEEKS, CALENDAR_TIMEZONE and TIMEOUT_SECONDS.

        Raises:
            ValueError: If a numeric variable is not a number
        """
        timeout = environ.get('TIMEOUT_SECONDS')
        return cls(
            number_of_weeks=int(environ.get('NUMBER_OF_WEEKS', cls.number_of_weeks)),
            timezone_id=environ.get('CALENDAR_TIMEZONE', cls.timezone_id),
            timeout_seconds=float(timeout) if timeout else None
        )
