"""Tests for QR code presentation."""
import base64
import io
from datetime import date, datetime, time, timezone
from types import SimpleNamespace
import pytest
from PIL import Image
from campus_attendance.services.qr_service import QrPresenter
from campus_attendance.services.scan_service import extract_session_id

@pytest.fixture
def presenter():
    return QrPresenter('https://app.example/')

@pytest.fixture
def session():
    return SimpleNamespace(
        id='abc123',
        course_name='Intro to Programming',
        session_name='Week 1 Lecture',
        session_date=date(2024, 1, 15),
        start_time=time(9, 0),
        end_time=time(10, 30)
    )

def decode(data_url):
    prefix = 'data:image/png;base64,'
    assert data_url.startswith(prefix)
    return Image.open(io.BytesIO(base64.b64decode(data_url[len(prefix):])))

def test_scan_url(presenter, session):
    assert presenter.build_scan_url(session) == 'https://app.example/attend/abc123'

def test_scan_url_quotes_id(presenter):
    url = presenter.scan_url_for('a b/c')
    assert url == 'https://app.example/attend/a%20b%2Fc'
    assert extract_session_id(url) == 'a b/c'

def test_scan_url_round_trips_through_parser(presenter, session):
    assert extract_session_id(presenter.build_scan_url(session)) == session.id

def test_scan_url_is_stable(presenter, session):
    assert presenter.build_scan_url(session) == presenter.build_scan_url(session)

def test_no_session_renders_nothing(presenter):
    assert presenter.render(None, datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)) is None

def test_active_session_is_scannable(presenter, session):
    now = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
    result = presenter.render(session, now)

    assert result.status == 'Active'
    assert result.scannable is True
    assert result.overlay_reason is None
    assert result.boundary_time is None
    assert result.scan_url == 'https://app.example/attend/abc123'

    image = decode(result.qr_image)
    # Unobscured codes are pure black and white
    colors = {color for _, color in image.convert('RGB').getcolors(maxcolors=1 << 16)}
    assert colors <= {(0, 0, 0), (255, 255, 255)}

def test_upcoming_session_is_obscured(presenter, session):
    now = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)
    result = presenter.render(session, now)

    assert result.status == 'Upcoming'
    assert result.scannable is False
    assert result.overlay_reason == 'Session Not Started'
    assert result.boundary_label == 'Session starts at'
    assert result.boundary_time == '09:00'
    # The URL itself does not change with status
    assert result.scan_url == 'https://app.example/attend/abc123'

    image = decode(result.qr_image).convert('RGB')
    colors = {color for _, color in image.getcolors(maxcolors=1 << 16)}
    assert not colors <= {(0, 0, 0), (255, 255, 255)}

def test_expired_session_shows_end_time(presenter, session):
    now = datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc)
    result = presenter.render(session, now)

    assert result.status == 'Expired'
    assert result.overlay_reason == 'Session Ended'
    assert result.boundary_label == 'Session ended at'
    assert result.boundary_time == '10:30'

def test_render_uses_presenter_timezone(session):
    presenter = QrPresenter('https://app.example', tz='Asia/Baghdad')
    # 06:30 UTC is 09:30 in Baghdad
    now = datetime(2024, 1, 15, 6, 30, tzinfo=timezone.utc)
    assert presenter.is_scannable(session, now)

def test_from_config():
    presenter = QrPresenter.from_config({
        'PUBLIC_BASE_URL': 'https://campus.example',
        'SESSION_TIMEZONE': 'UTC',
        'QR_BOX_SIZE': 6,
        'QR_BORDER': 2,
        'QR_ERROR_CORRECTION': 'h'
    })
    assert presenter.scan_url_for('x') == 'https://campus.example/attend/x'
    assert presenter.box_size == 6
