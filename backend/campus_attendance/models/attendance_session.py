# backend/campus_attendance/models/attendance_session.py
"""Scheduled class session students mark attendance for."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel

class AttendanceSession(BaseModel):
    """Session held on one date between two wall-clock times."""

    __tablename__ = 'attendance_sessions'

    course_id = db.Column(db.String(36), db.ForeignKey('courses.id'), nullable=False)
    section_id = db.Column(db.String(36), db.ForeignKey('sections.id'), nullable=True)
    lecturer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)

    session_name = db.Column(db.String(255), nullable=False)
    session_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    location = db.Column(db.String(100), nullable=True)

    # Relationships
    course = db.relationship('Course', backref=db.backref('sessions', lazy='dynamic'))
    section = db.relationship('Section', backref=db.backref('sessions', lazy='dynamic'))
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    @property
    def course_name(self) -> str:
        return self.course.course_name if self.course else 'Unknown Course'

    def to_dict(self, exclude: list = None):
        """Convert to dictionary."""
        data = super().to_dict(exclude=exclude)
        data['course_name'] = self.course_name
        data['course_code'] = self.course.course_code if self.course else None
        data['section_code'] = self.section.section_code if self.section else None
        return data

    def __repr__(self):
        return f'<AttendanceSession {self.session_name}>'
