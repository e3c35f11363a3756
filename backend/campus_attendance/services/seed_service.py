# File: backend/campus_attendance/services/seed_service.py
"""Database seeding service for demo data."""
from datetime import time, timedelta
from campus_attendance import db
from campus_attendance.models.user import User, UserRole
from campus_attendance.models.course import Course, Section, SectionEnrollment
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.services import session_clock

class SeedService:
    """Service to seed database with demo data."""

    @staticmethod
    def seed_all():
        """Seed all demo data."""
        SeedService.seed_user(
            'admin@university.edu', 'System Administrator', UserRole.ADMIN, 'admin123456'
        )
        lecturer = SeedService.seed_user(
            'lecturer@university.edu', 'Dr. Amina Hassan', UserRole.LECTURER, 'lecturer123'
        )
        student = SeedService.seed_user(
            'student@university.edu', 'Omar Khalid', UserRole.STUDENT, 'student123',
            student_number='CS2024001'
        )
        course, section = SeedService.seed_course(lecturer)
        SeedService.seed_enrollment(student, section)
        SeedService.seed_sessions(course, section, lecturer)
        db.session.commit()

    @staticmethod
    def seed_user(email, full_name, role, password, student_number=None):
        user = User.query.filter_by(email=email).first()
        if not user:
            user = User(email=email, full_name=full_name, role=role, student_number=student_number)
            user.set_password(password)
            db.session.add(user)
            db.session.flush()
            print(f"✅ Created {role.value}: {email} / {password}")
        return user

    @staticmethod
    def seed_course(lecturer):
        course = Course.query.filter_by(course_code='CS101').first()
        if not course:
            course = Course(
                course_code='CS101',
                course_name='Introduction to Programming',
                lecturer_id=lecturer.id
            )
            db.session.add(course)
            db.session.flush()

        section = Section.query.filter_by(section_code='CS101-A').first()
        if not section:
            section = Section(section_code='CS101-A', course_id=course.id)
            db.session.add(section)
            db.session.flush()

        return course, section

    @staticmethod
    def seed_enrollment(student, section):
        exists = SectionEnrollment.query.filter_by(
            student_id=student.id, section_id=section.id
        ).first()
        if not exists:
            db.session.add(SectionEnrollment(student_id=student.id, section_id=section.id))

    @staticmethod
    def seed_sessions(course, section, lecturer):
        """Yesterday's, today's all-day and tomorrow's sessions."""
        today = session_clock.utc_now().date()
        for offset, name in [(-1, 'Week 1 Lecture'), (0, 'Week 2 Lecture'), (1, 'Week 3 Lecture')]:
            day = today + timedelta(days=offset)
            if AttendanceSession.query.filter_by(course_id=course.id, session_date=day).first():
                continue
            db.session.add(AttendanceSession(
                course_id=course.id,
                section_id=section.id,
                lecturer_id=lecturer.id,
                session_name=name,
                session_date=day,
                start_time=time(0, 0),
                end_time=time(23, 59),
                location='Hall A'
            ))
        print(f"✅ Sessions seeded around {today.isoformat()}")
