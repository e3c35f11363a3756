# backend/campus_attendance/utils/decorators.py
"""Custom decorators for authorization."""
from functools import wraps
from flask_jwt_extended import get_jwt_identity
from campus_attendance import db
from campus_attendance.models.user import User
from campus_attendance.utils.helpers import error_response

def lecturer_required(f):
    """Decorator to require lecturer role or higher."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        current_user_id = get_jwt_identity()
        user = db.session.get(User, current_user_id)

        if not user:
            return error_response("User not found", 404)

        if not user.is_lecturer():
            return error_response("Lecturer access required", 403)

        return f(*args, **kwargs)
    return decorated_function
