"""
Purpose:
- Gatekeep uploaded images before they reach the caption gateway.
- Checks declared type, size cap, and that Pillow can actually decode the bytes.

Notes:
- The gateway assumes a valid payload; all user-facing upload errors come from here.
"""

from __future__ import annotations
from io import BytesIO
from typing import Iterable, Optional
from PIL import Image, UnidentifiedImageError

# Pillow format name -> MIME type we accept
_FORMAT_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


class UploadRejected(ValueError):
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def _normalize_mime(content_type: Optional[str]) -> str:
    mime = (content_type or "").split(";")[0].strip().lower()
    return "image/jpeg" if mime == "image/jpg" else mime


def _sniff_mime(raw: bytes) -> Optional[str]:
    try:
        with Image.open(BytesIO(raw)) as img:
            img.verify()
            return _FORMAT_MIME.get(img.format or "")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise UploadRejected("INVALID_IMAGE", f"Could not decode image: {e}") from e


def validate_upload(raw: bytes, content_type: Optional[str], max_bytes: int, allowed: Iterable[str]) -> str:
    """
    Return the MIME type to send upstream, or raise UploadRejected.
    """
    allowed_set = {a.lower() for a in allowed}
    if not raw:
        raise UploadRejected("EMPTY_UPLOAD", "Please upload an image.")

    mime = _normalize_mime(content_type)
    if mime not in allowed_set:
        raise UploadRejected("UNSUPPORTED_TYPE", "Unsupported file type. Please use JPG, PNG, or WEBP.")

    if len(raw) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise UploadRejected("FILE_TOO_LARGE", f"File size too large. Max allowed is {limit_mb:g}MB.")

    sniffed = _sniff_mime(raw)
    if sniffed != mime:
        # declared image/png but the bytes are a GIF, etc.
        raise UploadRejected("UNSUPPORTED_TYPE", "Unsupported file type. Please use JPG, PNG, or WEBP.")
    return mime
