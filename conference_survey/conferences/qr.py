"""QR code rendering for conference registration links."""

from __future__ import annotations

import base64
from io import BytesIO

import qrcode
from qrcode.image.svg import SvgPathImage

QR_FILL_COLOR = "#1e1b4b"
QR_BACK_COLOR = "#ffffff"


def _build(url: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=20,
        border=2,
    )
    qr.add_data(url)
    qr.make(fit=True)
    return qr


def qr_png_bytes(url: str) -> bytes:
    img = _build(url).make_image(fill_color=QR_FILL_COLOR, back_color=QR_BACK_COLOR)
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def qr_svg_bytes(url: str) -> bytes:
    img = _build(url).make_image(image_factory=SvgPathImage)
    buffer = BytesIO()
    img.save(buffer)
    return buffer.getvalue()


def qr_data_url(url: str) -> str:
    encoded = base64.b64encode(qr_png_bytes(url)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
