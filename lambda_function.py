"""AWS Lambda handler serving the school schedule as an iCalendar feed."""
import functools
import json
import logging
import os
import time
import traceback
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from credentials.secrets_loader import load_credentials
from fetcher.schedule_fetcher import ScheduleFetcher
from processor.calendar_builder import CalendarBuilder
from processor.event_formatter import EventFormatter
from processor.models import Credentials, ScopeFilter, Settings

# Attributes present on every LogRecord; anything else came from extra=
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}

SCOPES = {
    'LESSONS': ScopeFilter.LESSONS,
    'ASSESSMENTS': ScopeFilter.ASSESSMENTS,
    'ALL': ScopeFilter.COMPLETE,
    'COMPLETE': ScopeFilter.COMPLETE,
}
DEFAULT_SCOPE = ScopeFilter.ASSESSMENTS

ERROR_MARKER = 'error scraping'


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including any extra= fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@functools.lru_cache(maxsize=1)
def get_credentials() -> Credentials:
    """Load the credentials once per execution environment."""
    return load_credentials()


def create_builder(settings: Settings, credentials: Credentials) -> CalendarBuilder:
    """
    Wire the fetcher, formatter and builder for one request.

    Args:
        settings: Runtime configuration
        credentials: School API credentials, passed on to the fetcher

    Returns:
        Configured CalendarBuilder
    """
    tz = ZoneInfo(settings.timezone_id)
    return CalendarBuilder(
        ScheduleFetcher(credentials, timeout=settings.timeout_seconds),
        EventFormatter(settings.timezone_id, tz=tz),
        number_of_weeks=settings.number_of_weeks,
        tz=tz
    )


def resolve_scope(requested: Optional[str]) -> ScopeFilter:
    """
    Map the scope query parameter to a ScopeFilter.

    Args:
        requested: Raw parameter value, case-insensitive; may be None

    Returns:
        Matching ScopeFilter, ASSESSMENTS for anything unrecognized
    """
    return SCOPES.get((requested or '').upper(), DEFAULT_SCOPE)


def _text_response(body: str) -> Dict[str, Any]:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'text/plain; charset=utf-8'},
        'body': body
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler building the schedule calendar.

    Failures are reported in the body of a 200 response, prefixed with
    ERROR_MARKER and followed by the traceback.

    Args:
        event: Function URL / API Gateway proxy event
        context: Lambda context object

    Returns:
        Response dict with statusCode, headers and the calendar text as body
    """
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    query = (event or {}).get('queryStringParameters') or {}
    scope = resolve_scope(query.get('scope'))

    start_time = time.time()
    logger.info(
        f"building calendar {scope.name}",
        extra={'scope': scope.name}
    )

    try:
        settings = Settings.from_env(os.environ)
        builder = create_builder(settings, get_credentials())
        calendar = builder.build(scope)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Calendar build failed: {e}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _text_response(f"{ERROR_MARKER} {e}\n{traceback.format_exc()}")

    duration = time.time() - start_time
    logger.info(
        "Calendar built successfully",
        extra={
            'duration_seconds': round(duration, 2),
            'events': calendar.count('BEGIN:VEVENT')
        }
    )
    return _text_response(calendar)
