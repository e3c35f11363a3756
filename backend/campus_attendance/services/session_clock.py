# backend/campus_attendance/services/session_clock.py
"""Session time window classification.

Sessions are stored as a calendar date plus two wall-clock times. Both the
session window and "now" must be real instants in the same timeline before
they are compared, so every value handled here is timezone-aware. Naive
datetimes are rejected rather than assumed to be UTC or local time.
"""
from datetime import date, datetime, time, timezone, tzinfo
from enum import Enum
from typing import Tuple, Union
from zoneinfo import ZoneInfo

class SessionStatus(Enum):
    """Derived status of a session at a given instant."""
    UPCOMING = 'Upcoming'
    ACTIVE = 'Active'
    EXPIRED = 'Expired'

def utc_now() -> datetime:
    """Current instant. All callers read the clock through this function."""
    return datetime.now(timezone.utc)

def _require_aware(value: datetime, name: str) -> None:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError(f"{name} must be a timezone-aware datetime")

def classify(start: datetime, end: datetime, now: datetime) -> SessionStatus:
    """Classify ``now`` against the closed interval [start, end]."""
    _require_aware(start, 'start')
    _require_aware(end, 'end')
    _require_aware(now, 'now')

    if now < start:
        return SessionStatus.UPCOMING
    if now <= end:
        return SessionStatus.ACTIVE
    return SessionStatus.EXPIRED

def resolve_timezone(tz: Union[str, tzinfo, None]) -> tzinfo:
    """Turn a configured zone name into a tzinfo; ``None`` means UTC."""
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return timezone.utc if tz.upper() == 'UTC' else ZoneInfo(tz)
    return tz

def session_window(
    session_date: date,
    start_time: time,
    end_time: time,
    tz: Union[str, tzinfo, None] = None
) -> Tuple[datetime, datetime]:
    """
    Combine a session date and its wall-clock times into two instants.
    Returns: (start, end)
    """
    zone = resolve_timezone(tz)
    start = datetime.combine(session_date, start_time.replace(tzinfo=None), tzinfo=zone)
    end = datetime.combine(session_date, end_time.replace(tzinfo=None), tzinfo=zone)

    if end < start:
        raise ValueError("Session end time must not be before its start time")

    return start, end

def session_status(session, now: datetime, tz: Union[str, tzinfo, None] = None) -> SessionStatus:
    """Status of any object exposing session_date, start_time and end_time."""
    start, end = session_window(session.session_date, session.start_time, session.end_time, tz)
    return classify(start, end, now)
