"""Client-visible failures of a scan attempt."""

GENERIC_FAILURE_MESSAGE = 'Failed to mark attendance. Please try again.'

class ScanError(Exception):
    """Base class; ``message`` is what the student sees."""

    kind = 'scan_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class InvalidPayload(ScanError):
    """Scanned content is not an attendance URL or has no session id."""
    kind = 'invalid_payload'

class Unauthenticated(ScanError):
    """No logged-in user at scan time."""
    kind = 'unauthenticated'

class RemoteRejected(ScanError):
    """The mark-attendance function refused the request."""
    kind = 'remote_rejected'

class TransportError(ScanError):
    """The mark-attendance function could not be reached."""
    kind = 'transport_error'

    def __init__(self, message: str = 'Could not reach the attendance service. '
                                      'Please check your connection and try again.'):
        super().__init__(message)

class DeviceError(ScanError):
    """The camera or scanning layer failed before anything was decoded."""
    kind = 'device_error'

class ScanInProgress(ScanError):
    """The same attendance is already being submitted."""
    kind = 'scan_in_progress'
