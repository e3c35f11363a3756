"""Tests for session window classification."""
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo
import pytest
from campus_attendance.services.session_clock import (
    SessionStatus, classify, resolve_timezone, session_status, session_window
)

START = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
END = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

def test_before_start_is_upcoming():
    now = datetime(2024, 1, 15, 8, 59, 59, tzinfo=timezone.utc)
    assert classify(START, END, now) is SessionStatus.UPCOMING

def test_inside_window_is_active():
    now = datetime(2024, 1, 15, 9, 45, tzinfo=timezone.utc)
    assert classify(START, END, now) is SessionStatus.ACTIVE

def test_both_boundaries_are_active():
    assert classify(START, END, START) is SessionStatus.ACTIVE
    assert classify(START, END, END) is SessionStatus.ACTIVE

def test_after_end_is_expired():
    now = datetime(2024, 1, 15, 10, 30, 1, tzinfo=timezone.utc)
    assert classify(START, END, now) is SessionStatus.EXPIRED

def test_zero_length_window():
    assert classify(START, START, START) is SessionStatus.ACTIVE
    assert classify(START, START, START + timedelta(microseconds=1)) is SessionStatus.EXPIRED

def test_other_offset_compares_as_instant():
    # 11:00 in UTC+2 is 09:00 UTC
    now = datetime(2024, 1, 15, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert classify(START, END, now) is SessionStatus.ACTIVE

@pytest.mark.parametrize('field', ['start', 'end', 'now'])
def test_naive_datetime_rejected(field):
    values = {'start': START, 'end': END, 'now': START}
    values[field] = values[field].replace(tzinfo=None)
    with pytest.raises(ValueError):
        classify(values['start'], values['end'], values['now'])

def test_status_values():
    assert [s.value for s in SessionStatus] == ['Upcoming', 'Active', 'Expired']

def test_resolve_timezone():
    assert resolve_timezone(None) is timezone.utc
    assert resolve_timezone('UTC') is timezone.utc
    assert resolve_timezone('Asia/Baghdad') == ZoneInfo('Asia/Baghdad')

def test_session_window_in_zone():
    start, end = session_window(date(2024, 1, 15), time(9, 0), time(10, 30), 'Asia/Baghdad')
    assert start == datetime(2024, 1, 15, 6, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 15, 7, 30, tzinfo=timezone.utc)

def test_session_window_end_before_start():
    with pytest.raises(ValueError):
        session_window(date(2024, 1, 15), time(10, 0), time(9, 0))

def test_session_status_from_record():
    session = SimpleNamespace(
        session_date=date(2024, 1, 15), start_time=time(9, 0), end_time=time(10, 30)
    )
    now = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert session_status(session, now) is SessionStatus.ACTIVE
    # Same instant is 13:00 in Baghdad, after the local window
    assert session_status(session, now, 'Asia/Baghdad') is SessionStatus.EXPIRED

@pytest.mark.parametrize('now', [
    START - timedelta(microseconds=1), START, END, END + timedelta(microseconds=1)
])
def test_classify_is_repeatable(now):
    results = {classify(START, END, now) for _ in range(5)}
    assert len(results) == 1

def test_session_status_is_repeatable():
    session = SimpleNamespace(
        session_date=date(2024, 1, 15), start_time=time(9, 0), end_time=time(10, 30)
    )
    for now in (START, END, END + timedelta(seconds=1)):
        first = session_status(session, now)
        assert all(session_status(session, now) is first for _ in range(5))
