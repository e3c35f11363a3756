# backend/campus_attendance/api/attend.py
"""Landing route encoded in session QR codes (/attend/<session_id>)."""
from flask import Blueprint, current_app
from campus_attendance import db, limiter
from campus_attendance.api.scan import (
    handler_for_request, outcome_response, scan_rate_key, scan_rate_limit
)
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.services import session_clock
from campus_attendance.services.qr_service import QrPresenter
from campus_attendance.services.scan_service import Notifier
from campus_attendance.utils.helpers import success_response, error_response

attend_bp = Blueprint('attend', __name__)

@attend_bp.route('/<session_id>', methods=['GET'])
@limiter.limit(scan_rate_limit, key_func=scan_rate_key)
def session_summary(session_id):
    """What a student sees after following a scanned code."""
    session = db.session.get(AttendanceSession, session_id)
    if not session:
        return error_response("Session not found or no longer active", 404)

    tz = current_app.config.get('SESSION_TIMEZONE')
    status = session_clock.session_status(session, session_clock.utc_now(), tz)

    return success_response(
        data={
            'session_id': session.id,
            'course_name': session.course_name,
            'course_code': session.course.course_code if session.course else None,
            'session_name': session.session_name,
            'session_date': session.session_date.isoformat(),
            'start_time': session.start_time.strftime('%H:%M'),
            'end_time': session.end_time.strftime('%H:%M'),
            'lecturer_name': session.course.lecturer.full_name
                if session.course and session.course.lecturer else 'Unknown Lecturer',
            'status': status.value
        }
    )

@attend_bp.route('/<session_id>', methods=['POST'])
@limiter.limit(scan_rate_limit, key_func=scan_rate_key)
def mark_from_link(session_id):
    """Mark attendance for the session named in the route itself."""
    notifier = Notifier()
    completed = {}
    handler = handler_for_request(notifier, completed)

    presenter = QrPresenter.from_config(current_app.config)
    payload = presenter.scan_url_for(session_id)

    outcome = handler.handle_scan(payload)
    return outcome_response(outcome, notifier, completed)
