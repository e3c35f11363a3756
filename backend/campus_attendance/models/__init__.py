"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .course import Course, Section, SectionEnrollment
from .attendance_session import AttendanceSession
from .attendance import AttendanceRecord

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Course', 'Section', 'SectionEnrollment',
    'AttendanceSession', 'AttendanceRecord'
]
