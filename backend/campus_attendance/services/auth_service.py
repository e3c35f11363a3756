"""Authentication service for user management."""
import re
from datetime import datetime
from typing import Optional, Tuple

from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from campus_attendance import db
from campus_attendance.models.user import User, UserRole

class AuthService:
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email) is not None

    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return an access token."""
        if not email or not password:
            return None, "Email and password are required"

        if not AuthService.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = datetime.utcnow()
        user.save()

        return {
            "access_token": create_access_token(identity=user.id),
            "user": user.to_dict()
        }, None

    @staticmethod
    def get_user_by_id(user_id: str) -> Optional[User]:
        """Get user by ID."""
        return db.session.get(User, user_id)

    @staticmethod
    def current_student_id() -> Optional[str]:
        """
        Id of the logged-in, active student for this request.
        Returns None when the request carries no usable identity.
        """
        try:
            verify_jwt_in_request(optional=True)
        except (JWTExtendedException, PyJWTError):
            return None

        user_id = get_jwt_identity()
        if not user_id:
            return None

        user = AuthService.get_user_by_id(user_id)
        if not user or not user.is_active or user.role != UserRole.STUDENT:
            return None
        return user.id
