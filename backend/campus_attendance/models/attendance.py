# backend/campus_attendance/models/attendance.py
"""Attendance record model."""
from datetime import datetime
from campus_attendance import db
from campus_attendance.models.base import BaseModel

class AttendanceRecord(BaseModel):
    """One student's attendance for one session."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )

    session_id = db.Column(db.String(36), db.ForeignKey('attendance_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='present')  # present, late, absent
    marked_at = db.Column(db.DateTime, default=datetime.utcnow)
    method_used = db.Column(db.String(20), nullable=False, default='qr_code')

    student = db.relationship('User', backref=db.backref('attendance_records', lazy='dynamic'))

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.session_id}>'
