"""Rendering of schedule entries as iCalendar VEVENT blocks."""
from datetime import tzinfo
from typing import Any, List, Optional

from processor.date_formatter import to_event_timestamp
from processor.models import ScheduleEntry, ScopeFilter, parse_timestamp

NEWLINE = "\r\n"


class EventFormatter:
    """Formatter turning schedule entries into VEVENT text."""
    
    ASSESSMENT_PREFIX = "\U0001F644"
    EVENT_LOCATION = ""
    EVENT_DESCRIPTION = ""
    ASSESSMENT_ALARMS = ("-P7D", "-P2D", "-P1D")
    
    def __init__(self, timezone_id: str = 'Europe/Lisbon',
                 tz: Optional[tzinfo] = None):
        """
        Initialize the formatter.
        
        Args:
            timezone_id: Zone identifier written in DTSTART/DTEND TZID parameters
            tz: Zone that offset-aware upstream timestamps are converted to
        """
        self.timezone_id = timezone_id
        self.tz = tz
    
    def format_entry(self, entry: ScheduleEntry, scope: ScopeFilter) -> str:
        """
        Render one schedule entry as a VEVENT block.
        
        Args:
            entry: Lesson or assessment to render
            scope: Active scope filter
            
        Returns:
            CRLF-separated VEVENT text, or an empty string when the entry
            is outside the scope
        """
        is_assessment = entry.is_assessment
        if is_assessment and ScopeFilter.ASSESSMENTS not in scope:
            return ""
        if not is_assessment and ScopeFilter.LESSONS not in scope:
            return ""
        
        title = entry.title
        if is_assessment:
            title = f"{self.ASSESSMENT_PREFIX} {title}"
        
        lines = [
            "BEGIN:VEVENT",
            f"SUMMARY:{title}",
            f"DTSTART;TZID={self.timezone_id}:{self._timestamp(entry.start_time)}",
            f"DTEND;TZID={self.timezone_id}:{self._timestamp(entry.end_time)}",
            f"LOCATION:{self.EVENT_LOCATION}",
            f"DESCRIPTION:{self.EVENT_DESCRIPTION}",
            "STATUS:CONFIRMED",
            "SEQUENCE:3",
        ]
        
        if is_assessment:
            for trigger in self.ASSESSMENT_ALARMS:
                lines.extend(self._alarm_lines(trigger, title))
        
        lines.append("END:VEVENT")
        return NEWLINE.join(lines)
    
    def _timestamp(self, value: Any) -> str:
        return to_event_timestamp(parse_timestamp(value, self.tz))
    
    def _alarm_lines(self, trigger: str, title: str) -> List[str]:
        return [
            "BEGIN:VALARM",
            f"TRIGGER:{trigger}",
            f"DESCRIPTION:{title}",
            "ACTION:DISPLAY",
            "END:VALARM",
        ]
