# backend/campus_attendance/api/functions.py
"""mark-attendance function endpoint.

Replies with ``{"message": ...}`` on success and ``{"error": ...}`` with a
400 status on any refusal, which is the shape scan clients parse.
"""
import logging
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from campus_attendance import db
from campus_attendance.models.user import User, UserRole
from campus_attendance.services.mark_attendance_service import (
    AttendanceRejected,
    MarkAttendanceService,
    SUCCESS_MESSAGE,
)

logger = logging.getLogger(__name__)

functions_bp = Blueprint('functions', __name__)

@functions_bp.route('/mark-attendance', methods=['POST'])
@jwt_required()
def mark_attendance():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    session_id = data.get('session_id')
    student_id = data.get('student_id')

    caller = db.session.get(User, get_jwt_identity())
    if not caller or not caller.is_active:
        return jsonify({'error': 'User not found or inactive.'}), 401

    if caller.role == UserRole.STUDENT and student_id and student_id != caller.id:
        return jsonify({'error': 'You can only mark your own attendance.'}), 403

    try:
        MarkAttendanceService.mark(
            session_id,
            student_id,
            tz=current_app.config.get('SESSION_TIMEZONE')
        )
    except AttendanceRejected as e:
        logger.warning("mark-attendance refused: %s", e.message)
        return jsonify({'error': e.message}), 400

    return jsonify({'message': SUCCESS_MESSAGE}), 200
