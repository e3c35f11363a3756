# backend/campus_attendance/services/scan_service.py
"""Turns a decoded QR payload into a recorded attendance entry."""
import json
import logging
import threading
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from campus_attendance.services.attendance_client import MarkAttendanceError
from campus_attendance.services.mark_attendance_service import SUCCESS_MESSAGE
from campus_attendance.services.scan_errors import (
    GENERIC_FAILURE_MESSAGE,
    DeviceError,
    InvalidPayload,
    RemoteRejected,
    ScanError,
    ScanInProgress,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

DEVICE_ERROR_MESSAGES = {
    'permission_denied': 'Please allow camera access to scan QR codes.',
    'insecure_context': 'Camera requires a secure connection (HTTPS). '
                        'Please use a secure connection to access the camera.',
    'no_camera': 'No camera was found on this device.',
}
DEFAULT_DEVICE_ERROR = 'Failed to start QR scanner. Please try again.'

def extract_session_id(payload: str) -> str:
    """
    Pull the session id out of a scanned QR payload.

    Accepted shapes:
      - ``https://host/any/path?session_id=<id>``
      - ``https://host/attend/<id>``
      - ``{"type": "attendance", "session_id": "<id>"}`` (older printed codes)
    """
    data = (payload or '').strip()

    if data.startswith('{'):
        try:
            legacy = json.loads(data)
        except ValueError:
            raise InvalidPayload('Invalid QR code format - expected URL or JSON data')
        if not isinstance(legacy, dict) or legacy.get('type') != 'attendance' \
                or not legacy.get('session_id'):
            raise InvalidPayload('Invalid attendance QR code')
        return str(legacy['session_id'])

    try:
        url = urlsplit(data)
    except ValueError:
        raise InvalidPayload('Invalid QR code format - expected URL or JSON data')

    if url.scheme not in ('http', 'https') or not url.netloc:
        raise InvalidPayload('Invalid QR code format - expected URL or JSON data')

    query_ids = [v for v in parse_qs(url.query).get('session_id', []) if v.strip()]
    if query_ids:
        return query_ids[0].strip()

    segments = url.path.split('/')
    if 'attend' in segments:
        index = segments.index('attend') + 1
        if index < len(segments) and segments[index]:
            return unquote(segments[index])

    raise InvalidPayload('Invalid QR code - session ID not found in URL')

def _message_from_data(error) -> Optional[str]:
    data = getattr(error, 'data', None)
    if isinstance(data, dict) and data.get('error'):
        return str(data['error'])
    return None

def _message_from_context(error) -> Optional[str]:
    context = getattr(error, 'context', None)
    if not context:
        return None
    try:
        parsed = json.loads(context)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, dict) and parsed.get('error'):
        return str(parsed['error'])
    return None

def _message_from_error(error) -> Optional[str]:
    message = getattr(error, 'message', None) or str(error)
    return message or None

MESSAGE_STRATEGIES = (_message_from_data, _message_from_context, _message_from_error)

def resolve_error_message(error, fallback: str = GENERIC_FAILURE_MESSAGE) -> str:
    """Most specific human-readable message the collaborator provided."""
    for strategy in MESSAGE_STRATEGIES:
        message = strategy(error)
        if message:
            return message
    return fallback

@dataclass
class Notification:
    level: str
    message: str

class Notifier:
    """Collects toast-style messages for the student's screen."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def success(self, message: str) -> None:
        self.notifications.append(Notification('success', message))

    def error(self, message: str) -> None:
        self.notifications.append(Notification('error', message))

    def to_list(self) -> List[dict]:
        return [asdict(n) for n in self.notifications]

@dataclass
class ScanOutcome:
    success: bool
    message: str
    session_id: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

class SubmissionGuard:
    """Tracks (session, student) pairs with a submission in flight."""

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight = set()

    def acquire(self, key) -> bool:
        with self._lock:
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def release(self, key) -> None:
        with self._lock:
            self._in_flight.discard(key)

default_guard = SubmissionGuard()

class ScanHandler:
    """
    Runs one scan attempt: parse the payload, resolve the student, submit.

    ``resolve_user`` returns the current student id or None. ``marker`` is a
    mark-attendance client. ``on_complete`` fires once after a successful
    submission. Failures are reported through ``notifier`` and never raised.
    """

    def __init__(
        self,
        resolve_user: Callable[[], Optional[str]],
        marker,
        notifier: Optional[Notifier] = None,
        on_complete: Optional[Callable[[str, str], None]] = None,
        auth_token: Optional[str] = None,
        guard: Optional[SubmissionGuard] = None
    ):
        self.resolve_user = resolve_user
        self.marker = marker
        self.notifier = notifier or Notifier()
        self.on_complete = on_complete
        self.auth_token = auth_token
        self.guard = guard or default_guard

    def handle_scan(self, payload: Optional[str]) -> Optional[ScanOutcome]:
        # Camera warm-up frames arrive without data
        if payload is None or (isinstance(payload, str) and not payload.strip()):
            return None

        session_id = None
        try:
            if not isinstance(payload, str):
                raise InvalidPayload('Invalid QR code format - expected URL or JSON data')
            session_id = extract_session_id(payload)
            student_id = self._resolve_student()
            self._submit(session_id, student_id)
        except ScanError as exc:
            return self._fail(exc, session_id)
        except Exception:
            logger.exception("Unexpected error while handling scan")
            self.notifier.error(GENERIC_FAILURE_MESSAGE)
            return ScanOutcome(False, GENERIC_FAILURE_MESSAGE, session_id, 'unexpected')

        self.notifier.success(SUCCESS_MESSAGE)
        if self.on_complete:
            try:
                self.on_complete(session_id, student_id)
            except Exception:
                logger.exception("Scan completion callback failed")

        return ScanOutcome(True, SUCCESS_MESSAGE, session_id)

    def handle_device_error(self, reason: Optional[str] = None) -> ScanOutcome:
        """Report a camera/scanner failure; nothing is parsed or submitted."""
        if not isinstance(reason, str):
            reason = ''
        message = DEVICE_ERROR_MESSAGES.get(reason, DEFAULT_DEVICE_ERROR)
        return self._fail(DeviceError(message), None)

    def _resolve_student(self) -> str:
        student_id = self.resolve_user()
        if not student_id:
            raise Unauthenticated(
                'You must be logged in to mark attendance. Please log in and try again.'
            )
        return student_id

    def _submit(self, session_id: str, student_id: str) -> None:
        key = (session_id, student_id)
        if not self.guard.acquire(key):
            raise ScanInProgress('Attendance for this session is already being submitted. Please wait.')

        try:
            self.marker.mark(session_id, student_id, auth_token=self.auth_token)
        except MarkAttendanceError as exc:
            raise RemoteRejected(resolve_error_message(exc))
        finally:
            self.guard.release(key)

    def _fail(self, error: ScanError, session_id: Optional[str]) -> ScanOutcome:
        logger.warning("Scan failed (%s): %s", error.kind, error.message)
        self.notifier.error(error.message)
        return ScanOutcome(False, error.message, session_id, error.kind)
