# qr.py

"""Render customer order links as scannable QR codes."""

from __future__ import annotations

import base64
import logging
from io import BytesIO
from typing import Dict

import qrcode

logger = logging.getLogger("qr")

_BLANK_PNG = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PQIv5gAAAABJRU5ErkJggg=="
)


def qr_data_url(url: str) -> str:
    """Return a PNG data URL encoding ``url``; a blank pixel if rendering fails."""

    try:
        img = qrcode.make(url)
        buf = BytesIO()
        img.save(buf, format="PNG")
        b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    except Exception:
        logger.exception("qr render failed")
        b64 = _BLANK_PNG
    return f"data:image/png;base64,{b64}"


def render_table_code(url: str, table_no: str) -> Dict[str, str]:
    """Return the printable code card for one table."""

    return {"tableNo": table_no, "url": url, "qrPngDataUrl": qr_data_url(url)}
