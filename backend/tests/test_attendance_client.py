"""Tests for the mark-attendance clients."""
from unittest import mock
import pytest
import requests
from campus_attendance.services.attendance_client import (
    LocalMarkAttendanceClient, MarkAttendanceError, NON_2XX_MESSAGE,
    RemoteMarkAttendanceClient, client_from_config
)
from campus_attendance.services.scan_errors import TransportError
from conftest import DURING

URL = 'https://functions.example/mark-attendance'

def fake_response(status_code, body=None, text=''):
    response = mock.Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.json.return_value = body
    return response

@pytest.fixture
def client():
    return RemoteMarkAttendanceClient(URL, timeout=3, api_key='anon-key')

def test_remote_success(client):
    with mock.patch('requests.post', return_value=fake_response(200, {'message': 'ok'})) as post:
        assert client.mark('s1', 'u1', auth_token='tok') == {'message': 'ok'}

    post.assert_called_once_with(
        URL,
        json={'session_id': 's1', 'student_id': 'u1'},
        headers={
            'Content-Type': 'application/json',
            'Authorization': 'Bearer tok',
            'apikey': 'anon-key'
        },
        timeout=3
    )

def test_remote_rejection_keeps_body(client):
    response = fake_response(400, text='{"error": "Invalid or expired session."}')
    with mock.patch('requests.post', return_value=response):
        with pytest.raises(MarkAttendanceError) as exc_info:
            client.mark('s1', 'u1')

    assert exc_info.value.message == NON_2XX_MESSAGE
    assert exc_info.value.context == '{"error": "Invalid or expired session."}'

def test_remote_timeout(client):
    with mock.patch('requests.post', side_effect=requests.exceptions.Timeout()):
        with pytest.raises(TransportError) as exc_info:
            client.mark('s1', 'u1')
    assert 'too long' in exc_info.value.message

def test_remote_unreachable(client):
    with mock.patch('requests.post', side_effect=requests.exceptions.ConnectionError()):
        with pytest.raises(TransportError):
            client.mark('s1', 'u1')

def test_remote_non_json_success(client):
    response = fake_response(200)
    response.json.side_effect = ValueError()
    with mock.patch('requests.post', return_value=response):
        assert client.mark('s1', 'u1') == {}

def test_client_from_config():
    remote = client_from_config({'MARK_ATTENDANCE_URL': URL, 'MARK_ATTENDANCE_TIMEOUT': 5})
    assert isinstance(remote, RemoteMarkAttendanceClient)
    assert remote.timeout == 5
    assert isinstance(client_from_config({'MARK_ATTENDANCE_URL': None}), LocalMarkAttendanceClient)

def test_local_client_marks(app, attendance_session, student, enrollment, freeze_clock):
    freeze_clock(DURING)
    result = LocalMarkAttendanceClient().mark(attendance_session.id, student.id)
    assert result == {'message': 'Attendance marked successfully!'}

def test_local_client_rejection_carries_error(app, attendance_session, student, freeze_clock):
    freeze_clock(DURING)
    with pytest.raises(MarkAttendanceError) as exc_info:
        LocalMarkAttendanceClient().mark(attendance_session.id, student.id)
    assert exc_info.value.data == {
        'error': 'You are not enrolled in this section or the session is not for your section.'
    }
