"""QR codes printed on tickets and receipts"""

import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from ...config import APP_URL

QR_FILL_COLOR = "#168D95"


def verification_url(ref_code: str) -> str:
    return f"{APP_URL}/verify/{ref_code}"


def generate_qr_png(ref_code: str) -> bytes:
    """Render the boarding verification URL for a booking as a PNG"""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=10, border=2)
    qr.add_data(verification_url(ref_code))
    qr.make(fit=True)

    img = qr.make_image(fill_color=QR_FILL_COLOR, back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
