"""Helper functions for the application."""
from flask import jsonify, request
from typing import Any, Optional

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, data: Any = None):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def bearer_token() -> Optional[str]:
    """Raw bearer token of the current request, if any."""
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip() or None
    return None
