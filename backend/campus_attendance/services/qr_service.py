# backend/campus_attendance/services/qr_service.py
"""QR code presentation for attendance sessions."""
import base64
import io
from dataclasses import asdict, dataclass
from datetime import datetime, tzinfo
from typing import Optional, Union
from urllib.parse import quote

import qrcode
from PIL import Image, ImageDraw, ImageFont

from campus_attendance.services.session_clock import SessionStatus, session_status

ERROR_CORRECTION_LEVELS = {
    'L': qrcode.constants.ERROR_CORRECT_L,
    'M': qrcode.constants.ERROR_CORRECT_M,
    'Q': qrcode.constants.ERROR_CORRECT_Q,
    'H': qrcode.constants.ERROR_CORRECT_H,
}

OVERLAY_REASONS = {
    SessionStatus.UPCOMING: 'Session Not Started',
    SessionStatus.EXPIRED: 'Session Ended',
}

@dataclass
class QrPresentation:
    """What the lecturer screen shows for one session."""
    session_id: str
    course_name: str
    session_name: str
    session_date: str
    start_time: str
    end_time: str
    scan_url: str
    qr_image: str
    status: str
    scannable: bool
    overlay_reason: Optional[str] = None
    boundary_label: Optional[str] = None
    boundary_time: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

def _format_time(value) -> str:
    return value.strftime('%H:%M') if hasattr(value, 'strftime') else str(value)

class QrPresenter:
    """Builds scan URLs and renders gated QR codes for sessions."""

    def __init__(
        self,
        base_url: str,
        tz: Union[str, tzinfo, None] = None,
        box_size: int = 10,
        border: int = 4,
        error_correction: str = 'M'
    ):
        self.base_url = base_url.rstrip('/')
        self.tz = tz
        self.box_size = box_size
        self.border = border
        self.error_correction = ERROR_CORRECTION_LEVELS[error_correction.upper()]

    @classmethod
    def from_config(cls, config) -> 'QrPresenter':
        return cls(
            base_url=config['PUBLIC_BASE_URL'],
            tz=config.get('SESSION_TIMEZONE'),
            box_size=config.get('QR_BOX_SIZE', 10),
            border=config.get('QR_BORDER', 4),
            error_correction=config.get('QR_ERROR_CORRECTION', 'M')
        )

    def build_scan_url(self, session) -> str:
        """Absolute URL routing a scanner to the marking flow for this session."""
        return self.scan_url_for(session.id)

    def scan_url_for(self, session_id) -> str:
        return f"{self.base_url}/attend/{quote(str(session_id), safe='')}"

    def status(self, session, now: datetime) -> SessionStatus:
        return session_status(session, now, self.tz)

    def is_scannable(self, session, now: datetime) -> bool:
        return self.status(session, now) is SessionStatus.ACTIVE

    def render(self, session, now: datetime) -> Optional[QrPresentation]:
        """
        Render the session QR code.
        Returns None while no session is loaded.
        """
        if session is None:
            return None

        status = self.status(session, now)
        scan_url = self.build_scan_url(session)
        image = self._make_image(scan_url)

        presentation = QrPresentation(
            session_id=str(session.id),
            course_name=getattr(session, 'course_name', ''),
            session_name=session.session_name,
            session_date=session.session_date.isoformat(),
            start_time=_format_time(session.start_time),
            end_time=_format_time(session.end_time),
            scan_url=scan_url,
            qr_image='',
            status=status.value,
            scannable=status is SessionStatus.ACTIVE
        )

        if status is not SessionStatus.ACTIVE:
            presentation.overlay_reason = OVERLAY_REASONS[status]
            if status is SessionStatus.UPCOMING:
                presentation.boundary_label = 'Session starts at'
                presentation.boundary_time = presentation.start_time
            else:
                presentation.boundary_label = 'Session ended at'
                presentation.boundary_time = presentation.end_time
            image = self._obscure(image, presentation.overlay_reason)

        presentation.qr_image = self._to_data_url(image)
        return presentation

    def _make_image(self, data: str) -> Image.Image:
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=self.error_correction,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        return img.get_image().convert('RGB')

    @staticmethod
    def _obscure(image: Image.Image, label: str) -> Image.Image:
        """Grey the code out and stamp the reason across its middle."""
        veil = Image.new('RGB', image.size, (128, 128, 128))
        shaded = Image.blend(image, veil, 0.5)

        draw = ImageDraw.Draw(shaded)
        font = ImageFont.load_default()
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        x = (shaded.width - (right - left)) // 2
        y = (shaded.height - (bottom - top)) // 2
        draw.text((x, y), label, fill='white', font=font)

        return shaded

    @staticmethod
    def _to_data_url(image: Image.Image) -> str:
        buffered = io.BytesIO()
        image.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()
        return f"data:image/png;base64,{img_str}"
