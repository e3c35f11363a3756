# backend/campus_attendance/api/sessions.py
"""Session listing and lecturer-facing QR presentation."""
from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from campus_attendance import db
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.models.course import SectionEnrollment
from campus_attendance.models.user import User, UserRole
from campus_attendance.services import session_clock
from campus_attendance.services.qr_service import QrPresenter
from campus_attendance.utils.decorators import lecturer_required
from campus_attendance.utils.helpers import success_response, error_response

sessions_bp = Blueprint('sessions', __name__)

def session_with_status(session: AttendanceSession, now) -> dict:
    """Session dict plus the status badge derived from its time window."""
    data = session.to_dict()
    data['status'] = session_clock.session_status(
        session, now, current_app.config.get('SESSION_TIMEZONE')
    ).value
    return data

@sessions_bp.route('', methods=['GET'])
@jwt_required()
def list_sessions():
    """Sessions visible to the current user, newest first."""
    user = db.session.get(User, get_jwt_identity())
    if not user:
        return error_response("User not found", 404)

    query = AttendanceSession.query
    if user.role == UserRole.LECTURER:
        query = query.filter_by(lecturer_id=user.id)
    elif user.role == UserRole.STUDENT:
        section_ids = [
            e.section_id for e in SectionEnrollment.query.filter_by(
                student_id=user.id, status='active'
            )
        ]
        query = query.filter(AttendanceSession.section_id.in_(section_ids))

    course_id = request.args.get('course_id')
    if course_id:
        query = query.filter_by(course_id=course_id)

    sessions = query.order_by(
        AttendanceSession.session_date.desc(),
        AttendanceSession.start_time.desc()
    ).all()

    now = session_clock.utc_now()
    return success_response(
        data={
            'sessions': [session_with_status(s, now) for s in sessions],
            'total': len(sessions)
        }
    )

@sessions_bp.route('/<session_id>', methods=['GET'])
@jwt_required()
def get_session(session_id):
    """Single session with its current status."""
    session = db.session.get(AttendanceSession, session_id)
    if not session:
        return error_response("Session not found", 404)

    return success_response(data=session_with_status(session, session_clock.utc_now()))

@sessions_bp.route('/<session_id>/qr', methods=['GET'])
@jwt_required()
@lecturer_required
def session_qr(session_id):
    """QR code for the lecturer screen, obscured outside the session window."""
    session = db.session.get(AttendanceSession, session_id)
    if not session:
        return error_response("Session not found", 404)

    user = db.session.get(User, get_jwt_identity())
    if user.role != UserRole.ADMIN and session.lecturer_id != user.id:
        return error_response("You can only present QR codes for your own sessions", 403)

    presenter = QrPresenter.from_config(current_app.config)
    presentation = presenter.render(session, session_clock.utc_now())

    return success_response(
        data=presentation.to_dict(),
        message="QR code generated successfully"
    )
