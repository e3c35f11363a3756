# backend/campus_attendance/api/scan.py
"""Student-facing QR scan endpoint."""
from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_limiter.util import get_remote_address
from jwt.exceptions import PyJWTError
from campus_attendance import limiter
from campus_attendance.models.attendance import AttendanceRecord
from campus_attendance.services.attendance_client import client_from_config
from campus_attendance.services.auth_service import AuthService
from campus_attendance.services.scan_service import Notifier, ScanHandler
from campus_attendance.utils.helpers import bearer_token, success_response, error_response

scan_bp = Blueprint('scan', __name__)

FAILURE_STATUS_CODES = {
    'invalid_payload': 400,
    'device_error': 400,
    'unauthenticated': 401,
    'remote_rejected': 400,
    'scan_in_progress': 409,
    'transport_error': 503,
    'unexpected': 500,
}

def scan_rate_key() -> str:
    """Rate-limit scans per logged-in user; anonymous callers share their address."""
    try:
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError):
        identity = None

    if identity:
        return f'user:{identity}'
    return get_remote_address()

def scan_rate_limit() -> str:
    return current_app.config['SCAN_RATE_LIMIT']

def handler_for_request(notifier: Notifier, completed: dict) -> ScanHandler:
    """Scan handler wired to this request's user and the configured function."""

    def refresh_attendance(session_id, student_id):
        record = AttendanceRecord.query.filter_by(
            session_id=session_id,
            student_id=student_id
        ).first()
        completed['attendance'] = record.to_dict() if record else None

    return ScanHandler(
        resolve_user=AuthService.current_student_id,
        marker=client_from_config(current_app.config),
        notifier=notifier,
        on_complete=refresh_attendance,
        auth_token=bearer_token()
    )

def outcome_response(outcome, notifier: Notifier, completed: dict):
    """Map a scan outcome to the JSON envelope."""
    data = {
        'outcome': outcome.to_dict(),
        'notifications': notifier.to_list()
    }

    if outcome.success:
        data['attendance'] = completed.get('attendance')
        return success_response(data=data, message=outcome.message)

    status_code = FAILURE_STATUS_CODES.get(outcome.error_kind, 400)
    return error_response(outcome.message, status_code, data=data)

@scan_bp.route('', methods=['POST'])
@limiter.limit(scan_rate_limit, key_func=scan_rate_key)
def scan():
    """Handle one decoded QR payload, or a scanner failure report."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    notifier = Notifier()
    completed = {}
    handler = handler_for_request(notifier, completed)

    if 'device_error' in data:
        outcome = handler.handle_device_error(data.get('device_error'))
        return outcome_response(outcome, notifier, completed)

    outcome = handler.handle_scan(data.get('payload'))
    if outcome is None:
        return error_response("No QR code data provided", 400)

    return outcome_response(outcome, notifier, completed)
