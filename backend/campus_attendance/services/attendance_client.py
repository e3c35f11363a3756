# backend/campus_attendance/services/attendance_client.py
"""Clients for the mark-attendance function."""
import logging
from typing import Any, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError

from campus_attendance import db
from campus_attendance.services.mark_attendance_service import (
    AttendanceRejected,
    MarkAttendanceService,
    SUCCESS_MESSAGE,
)
from campus_attendance.services.scan_errors import TransportError

logger = logging.getLogger(__name__)

NON_2XX_MESSAGE = 'Edge Function returned a non-2xx status code'

class MarkAttendanceError(Exception):
    """
    Structured error reported by the function.

    ``data`` is the decoded response body when there is one and ``context``
    the raw body text, which itself usually holds ``{"error": "..."}``.
    """

    def __init__(self, message: str, data: Any = None, context: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.data = data
        self.context = context

class RemoteMarkAttendanceClient:
    """Calls a hosted mark-attendance function over HTTP."""

    def __init__(self, url: str, timeout: float = 15, api_key: Optional[str] = None):
        self.url = url
        self.timeout = timeout
        self.api_key = api_key

    def mark(self, session_id: str, student_id: str, auth_token: Optional[str] = None) -> dict:
        headers = {'Content-Type': 'application/json'}
        if auth_token:
            headers['Authorization'] = f'Bearer {auth_token}'
        if self.api_key:
            headers['apikey'] = self.api_key

        try:
            response = requests.post(
                self.url,
                json={'session_id': session_id, 'student_id': student_id},
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning("mark-attendance timed out after %ss", self.timeout)
            raise TransportError('The attendance service took too long to respond. Please try again.')
        except requests.exceptions.RequestException as exc:
            logger.warning("mark-attendance unreachable: %s", exc)
            raise TransportError()

        if not response.ok:
            raise MarkAttendanceError(NON_2XX_MESSAGE, context=response.text)

        try:
            return response.json()
        except ValueError:
            return {}

class LocalMarkAttendanceClient:
    """Runs the marking rules in-process against the application database."""

    def __init__(self, tz=None):
        self.tz = tz

    def mark(self, session_id: str, student_id: str, auth_token: Optional[str] = None) -> dict:
        try:
            MarkAttendanceService.mark(session_id, student_id, tz=self.tz)
        except AttendanceRejected as exc:
            raise MarkAttendanceError(NON_2XX_MESSAGE, data={'error': exc.message})
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Database error while marking attendance")
            raise TransportError()

        return {'message': SUCCESS_MESSAGE}

def client_from_config(config):
    """Remote client when a function URL is configured, local otherwise."""
    if config.get('MARK_ATTENDANCE_URL'):
        return RemoteMarkAttendanceClient(
            url=config['MARK_ATTENDANCE_URL'],
            timeout=config.get('MARK_ATTENDANCE_TIMEOUT', 15),
            api_key=config.get('MARK_ATTENDANCE_API_KEY')
        )
    return LocalMarkAttendanceClient(tz=config.get('SESSION_TIMEZONE'))
