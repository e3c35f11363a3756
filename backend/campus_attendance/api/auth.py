# File: backend/campus_attendance/api/auth.py
"""Authentication API."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from campus_attendance import limiter
from campus_attendance.utils.helpers import success_response, error_response
from campus_attendance.services.auth_service import AuthService

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Email and password login for all roles."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400)

    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not email or not password:
        return error_response("Email and password are required", 400)

    result, error = AuthService.login(email, password)

    if error:
        return error_response(error, 401)

    return success_response(
        data=result,
        message="Login successful"
    )

@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    """Profile of the current user."""
    user = AuthService.get_user_by_id(get_jwt_identity())

    if not user:
        return error_response("User not found", 404)

    return success_response(data=user.to_dict())
