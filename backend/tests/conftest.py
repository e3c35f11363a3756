"""Shared fixtures: app, seeded users, a course section and one session."""
from datetime import date, datetime, time, timezone
import pytest
from flask_jwt_extended import create_access_token
from campus_attendance import create_app, db
from campus_attendance.models.user import User, UserRole
from campus_attendance.models.course import Course, Section, SectionEnrollment
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.services import scan_service, session_clock

SESSION_DATE = date(2024, 1, 15)
BEFORE_START = datetime(2024, 1, 15, 8, 59, 59, tzinfo=timezone.utc)
DURING = datetime(2024, 1, 15, 9, 45, tzinfo=timezone.utc)
AFTER_END = datetime(2024, 1, 15, 10, 30, 1, tzinfo=timezone.utc)

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture(autouse=True)
def fresh_guard(monkeypatch):
    monkeypatch.setattr(scan_service, 'default_guard', scan_service.SubmissionGuard())

@pytest.fixture
def freeze_clock(monkeypatch):
    """Pin session_clock.utc_now to a given instant."""
    def freeze(instant):
        monkeypatch.setattr(session_clock, 'utc_now', lambda: instant)
        return instant
    return freeze

def make_user(email, role, full_name='Test User', password='password123', **kwargs):
    user = User(email=email, full_name=full_name, role=role, **kwargs)
    user.set_password(password)
    return user.save()

@pytest.fixture
def lecturer(app):
    return make_user('lecturer@example.com', UserRole.LECTURER, full_name='Dr. Lecturer')

@pytest.fixture
def other_lecturer(app):
    return make_user('other@example.com', UserRole.LECTURER, full_name='Dr. Other')

@pytest.fixture
def student(app):
    return make_user('student@example.com', UserRole.STUDENT, full_name='Sara Student',
                     student_number='S001')

@pytest.fixture
def outsider(app):
    """Student not enrolled in the session's section."""
    return make_user('outsider@example.com', UserRole.STUDENT, full_name='Omar Outsider',
                     student_number='S002')

@pytest.fixture
def section(app, lecturer):
    course = Course(course_code='CS101', course_name='Intro to Programming',
                    lecturer_id=lecturer.id).save()
    return Section(section_code='CS101-A', course_id=course.id).save()

@pytest.fixture
def enrollment(section, student):
    return SectionEnrollment(student_id=student.id, section_id=section.id).save()

@pytest.fixture
def attendance_session(section, lecturer):
    """Held on 2024-01-15 between 09:00 and 10:30 UTC."""
    return AttendanceSession(
        course_id=section.course_id,
        section_id=section.id,
        lecturer_id=lecturer.id,
        session_name='Week 1 Lecture',
        session_date=SESSION_DATE,
        start_time=time(9, 0),
        end_time=time(10, 30),
        location='Hall A'
    ).save()

def auth_headers(user):
    return {'Authorization': f'Bearer {create_access_token(identity=user.id)}'}

@pytest.fixture
def student_headers(student):
    return auth_headers(student)

@pytest.fixture
def lecturer_headers(lecturer):
    return auth_headers(lecturer)

@pytest.fixture
def headers_for(app):
    return auth_headers
