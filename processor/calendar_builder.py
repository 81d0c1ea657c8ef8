"""Assembly of the iCalendar document from several weeks of schedule."""
import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional

from fetcher.schedule_fetcher import ScheduleFetcher
from processor.event_formatter import NEWLINE, EventFormatter
from processor.models import ScheduleEntry, ScheduleParseError, ScopeFilter

logger = logging.getLogger(__name__)


class CalendarBuilder:
    """Builds a VCALENDAR document from consecutive weekly schedules."""
    
    HEADER = ("BEGIN:VCALENDAR", "VERSION:2.0", "CALSCALE:GREGORIAN")
    FOOTER = ("END:VCALENDAR",)
    DEFAULT_NUMBER_OF_WEEKS = 4
    
    def __init__(self, fetcher: ScheduleFetcher, formatter: EventFormatter,
                 number_of_weeks: int = DEFAULT_NUMBER_OF_WEEKS,
                 tz: Optional[tzinfo] = None):
        """
        Initialize the calendar builder.
        
        Args:
            fetcher: Fetcher used for every weekly request
            formatter: Formatter for individual schedule entries
            number_of_weeks: Number of weeks requested per build (default: 4)
            tz: Calendar time zone used for the default "now"
        """
        if number_of_weeks < 1:
            raise ValueError(f"number_of_weeks must be positive, got {number_of_weeks}")
        self.fetcher = fetcher
        self.formatter = formatter
        self.number_of_weeks = number_of_weeks
        self.tz = tz
    
    def reference_dates(self, now: Optional[datetime] = None) -> List[datetime]:
        """
        Compute one reference date per requested week.
        
        Args:
            now: Starting point (default: current time in the calendar zone)
            
        Returns:
            Dates spaced 7 days apart, starting at now
        """
        if now is None:
            now = datetime.now(self.tz)
        return [now + timedelta(days=7 * week) for week in range(self.number_of_weeks)]
    
    def fetch_weeks(self, reference_dates: List[datetime]) -> List[str]:
        """
        Fetch all weeks in parallel and wait for every one of them.
        
        The first fetch to fail ends the wait at once; its error is raised
        without waiting for the remaining requests.
        
        Args:
            reference_dates: Reference date of each week, in request order
            
        Returns:
            Response bodies in request order
            
        Raises:
            Exception: The error of the earliest failed fetch; no partial results
        """
        executor = ThreadPoolExecutor(max_workers=len(reference_dates))
        futures = [
            executor.submit(self.fetcher.fetch_week, reference_date)
            for reference_date in reference_dates
        ]
        
        try:
            for future in as_completed(futures):
                error = future.exception()
                if error is not None:
                    raise error
        except BaseException:
            # Fetches still in flight are left to finish on their own
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        
        executor.shutdown()
        return [future.result() for future in futures]
    
    def parse_week(self, body: str) -> List[ScheduleEntry]:
        """
        Parse one weekly response body.
        
        Args:
            body: Response text, expected to hold a JSON array
            
        Returns:
            Schedule entries in received order
            
        Raises:
            ScheduleParseError: If the body is not a JSON array of entries
        """
        try:
            items = json.loads(body)
        except json.JSONDecodeError as e:
            raise ScheduleParseError(f"Schedule response is not valid JSON: {e}") from e
        
        if not isinstance(items, list):
            raise ScheduleParseError(
                f"Schedule response is not a JSON array: {type(items).__name__}"
            )
        
        return [ScheduleEntry.from_json(item) for item in items]
    
    def build(self, scope: ScopeFilter, now: Optional[datetime] = None) -> str:
        """
        Build the complete calendar document.
        
        Every entry contributes one line break, even when the scope filters
        it out and its rendered text is empty.
        
        Args:
            scope: Categories of entries to render
            now: Starting point for the first week (default: current time)
            
        Returns:
            CRLF-separated VCALENDAR document
        """
        reference_dates = self.reference_dates(now)
        logger.info(f"Requesting {len(reference_dates)} weeks of schedule")
        bodies = self.fetch_weeks(reference_dates)
        
        lines = list(self.HEADER)
        for body in bodies:
            for entry in self.parse_week(body):
                lines.append(self.formatter.format_entry(entry, scope))
        lines.extend(self.FOOTER)
        
        logger.info(f"Built calendar from {len(lines) - len(self.HEADER) - len(self.FOOTER)} entries")
        return NEWLINE.join(lines)
