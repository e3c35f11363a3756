# backend/campus_attendance/services/mark_attendance_service.py
"""Authoritative attendance marking rules."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError

from campus_attendance import db
from campus_attendance.models.attendance import AttendanceRecord
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.models.course import SectionEnrollment
from campus_attendance.services import session_clock
from campus_attendance.services.session_clock import SessionStatus

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = 'Attendance marked successfully!'

class AttendanceRejected(Exception):
    """Marking refused; the message is shown to the student as is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class MarkAttendanceService:
    """Service deciding whether a student may be marked present."""

    @staticmethod
    def mark(
        session_id: Optional[str],
        student_id: Optional[str],
        tz=None,
        now: Optional[datetime] = None
    ) -> AttendanceRecord:
        """Record the student as present or raise AttendanceRejected."""
        if not isinstance(session_id, str) or not isinstance(student_id, str) \
                or not session_id or not student_id:
            raise AttendanceRejected('Missing session_id or student_id in the request body.')

        session = db.session.get(AttendanceSession, session_id)
        if not session:
            raise AttendanceRejected('Invalid or expired session.')

        now = now or session_clock.utc_now()
        start, end = session_clock.session_window(
            session.session_date, session.start_time, session.end_time, tz
        )
        if session_clock.classify(start, end, now) is not SessionStatus.ACTIVE:
            raise AttendanceRejected(
                'Attendance can only be marked within the session time. '
                f'Current time: {now.isoformat()}, '
                f'Session start: {start.isoformat()}, '
                f'Session end: {end.isoformat()}'
            )

        if not session.section_id:
            raise AttendanceRejected(
                'This session is not assigned to any section. Please contact your lecturer.'
            )

        enrollment = SectionEnrollment.query.filter_by(
            student_id=student_id,
            section_id=session.section_id,
            status='active'
        ).first()
        if not enrollment:
            logger.info(
                "Section enrollment check failed: student=%s section=%s course=%s",
                student_id, session.section_id, session.course_id
            )
            raise AttendanceRejected(
                'You are not enrolled in this section or the session is not for your section.'
            )

        existing = AttendanceRecord.query.filter_by(
            session_id=session_id,
            student_id=student_id
        ).first()
        if existing:
            raise AttendanceRejected('Attendance has already been marked for this session.')

        record = AttendanceRecord(
            session_id=session_id,
            student_id=student_id,
            status='present',
            marked_at=now.astimezone(timezone.utc).replace(tzinfo=None),
            method_used='qr_code'
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent submission hit the unique constraint first
            db.session.rollback()
            raise AttendanceRejected('Attendance has already been marked for this session.')

        logger.info("Attendance marked: student=%s session=%s", student_id, session_id)
        return record
