# orders/services/imaging.py
"""
Barcode / QR rendering. Pure functions of the input string.
"""

from __future__ import annotations

import io

import barcode
import qrcode
from barcode.writer import ImageWriter


def render_barcode_png(text: str) -> bytes:
    """Code128 PNG with the human-readable text underneath."""
    code = barcode.get("code128", str(text), writer=ImageWriter())
    buf = io.BytesIO()
    code.write(buf, options={"module_height": 10.0, "font_size": 10, "text_distance": 4.0})
    return buf.getvalue()


def render_qr_png(text: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=2,
    )
    qr.add_data(str(text))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
