"""Unit tests for schedule data models."""
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from processor.models import (
    Credentials,
    ScheduleEntry,
    ScopeFilter,
    Settings,
    parse_timestamp,
)

LISBON = ZoneInfo('Europe/Lisbon')


class TestScopeFilter:
    """Test cases for ScopeFilter."""
    
    def test_complete_is_union(self):
        assert ScopeFilter.COMPLETE == ScopeFilter.LESSONS | ScopeFilter.ASSESSMENTS
    
    def test_membership(self):
        assert ScopeFilter.LESSONS in ScopeFilter.COMPLETE
        assert ScopeFilter.ASSESSMENTS in ScopeFilter.COMPLETE
        assert ScopeFilter.LESSONS not in ScopeFilter.ASSESSMENTS
        assert ScopeFilter.ASSESSMENTS not in ScopeFilter.LESSONS


class TestParseTimestamp:
    """Test cases for parse_timestamp."""
    
    def test_converts_utc_to_calendar_zone(self):
        parsed = parse_timestamp('2024-07-01T09:00:00.0000000Z', LISBON)
        # Lisbon is UTC+1 in summer
        assert parsed.hour == 10
        assert parsed.minute == 0
    
    def test_keeps_naive_timestamps(self):
        assert parse_timestamp('2024-02-23T10:34:00', LISBON) == datetime(2024, 2, 23, 10, 34)
    
    def test_without_zone_keeps_offset(self):
        parsed = parse_timestamp('2024-07-01T09:00:00Z')
        assert parsed.hour == 9
    
    def test_accepts_datetime(self):
        value = datetime(2024, 2, 23, 10, 34)
        assert parse_timestamp(value, LISBON) is value
    
    @pytest.mark.parametrize('value', [None, '', 'not a date', 12345, {}])
    def test_invalid_values_return_none(self, value):
        assert parse_timestamp(value, LISBON) is None


class TestScheduleEntry:
    """Test cases for ScheduleEntry.from_json."""
    
    def test_from_json(self):
        entry = ScheduleEntry.from_json({
            'evento': True,
            'descricao': 'Math Test',
            'horaInicio': '2024-07-01T09:00:00.0000000Z',
            'horaTermo': '2024-07-01T10:30:00.0000000Z',
        })
        
        assert entry.is_assessment is True
        assert entry.title == 'Math Test'
        assert entry.start_time == '2024-07-01T09:00:00.0000000Z'
        assert entry.end_time == '2024-07-01T10:30:00.0000000Z'
    
    def test_from_json_missing_fields(self):
        """Missing keys are kept as missing instead of failing."""
        entry = ScheduleEntry.from_json({'evento': True, 'descricao': 'Exam'})
        
        assert entry.is_assessment is True
        assert entry.start_time is None
        assert entry.end_time is None
    
    def test_from_json_missing_flag_and_title(self):
        entry = ScheduleEntry.from_json({
            'horaInicio': '2024-02-23T10:34:00',
            'horaTermo': '2024-02-23T11:20:00',
        })
        
        assert entry.is_assessment is False
        assert entry.title == ''
    
    def test_from_json_non_object(self):
        entry = ScheduleEntry.from_json(['not', 'an', 'object'])
        
        assert entry.is_assessment is False
        assert entry.title == ''
        assert entry.start_time is None


class TestSettings:
    """Test cases for Settings.from_env."""
    
    def test_defaults(self):
        settings = Settings.from_env({})
        
        assert settings.number_of_weeks == 4
        assert settings.timezone_id == 'Europe/Lisbon'
        assert settings.timeout_seconds is None
    
    def test_from_env(self):
        settings = Settings.from_env({
            'NUMBER_OF_WEEKS': '2',
            'CALENDAR_TIMEZONE': 'Europe/Madrid',
            'TIMEOUT_SECONDS': '12.5',
        })
        
        assert settings.number_of_weeks == 2
        assert settings.timezone_id == 'Europe/Madrid'
        assert settings.timeout_seconds == 12.5
    
    def test_invalid_number_of_weeks(self):
        with pytest.raises(ValueError):
            Settings.from_env({'NUMBER_OF_WEEKS': 'four'})


def test_credentials_repr_hides_password():
    credentials = Credentials(
        login='student',
        password='hunter2',
        server_base_url='https://school.example.com/api',
        student_number='1234'
    )
    assert 'hunter2' not in repr(credentials)
