"""
Purpose:
- In-memory representation of the image the user picked.
- MIME allow-list check, base64 encoding for transport, and the data: URL preview.

Notes:
- Nothing here touches disk; the image lives only as long as the session holds it.
"""

from __future__ import annotations
from dataclasses import dataclass
from io import BytesIO
import base64

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

ALLOWED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")
PREVIEW_MAX_SIDE = 1024

def is_allowed_mime_type(mime_type: str | None) -> bool:
    return (mime_type or "").lower() in ALLOWED_MIME_TYPES

@dataclass(frozen=True)
class SelectedImage:
    data: bytes
    mime_type: str
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    def encode(self) -> str:
        """Base64 payload without any data-URL prefix."""
        return base64.b64encode(self.data).decode("ascii")

def _data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

def make_preview_url(image: SelectedImage) -> str:
    """
    Orientation-corrected thumbnail as a data: URL.
    Bytes Pillow cannot decode are previewed as uploaded; the browser may still render them.
    """
    try:
        with Image.open(BytesIO(image.data)) as img:
            thumb = ImageOps.exif_transpose(img)
            thumb.thumbnail((PREVIEW_MAX_SIDE, PREVIEW_MAX_SIDE))
            if thumb.mode not in ("RGB", "RGBA"):
                thumb = thumb.convert("RGBA")
            buf = BytesIO()
            thumb.save(buf, format="PNG")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning("Preview fallback for {!r}: {!r}", image.filename, e)
        return _data_url(image.data, image.mime_type)
    return _data_url(buf.getvalue(), "image/png")
