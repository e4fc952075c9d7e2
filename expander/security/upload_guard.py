from __future__ import annotations

import re
from pathlib import Path

from expander.config import settings
from expander.errors import InvalidImageError, UploadTooLargeError


ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}

_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
_PIL_FORMAT_MIME_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}
_SAFE_NAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]+")


def safe_file_name(name: str | None, default_name: str = "upload.png") -> str:
    cleaned = _SAFE_NAME_PATTERN.sub("_", Path(name or "").name).strip("._")
    return cleaned or default_name


def resolve_mime_type(content_type: str | None, file_name: str | None) -> str:
    """Pick the declared MIME type, falling back to the file extension."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime in ALLOWED_MIME_TYPES:
        return mime
    if not mime or mime == "application/octet-stream":
        guessed = _EXTENSION_MIME_TYPES.get(Path(file_name or "").suffix.lower())
        if guessed is not None:
            return guessed
    raise InvalidImageError(f"unsupported image type: {mime or '(none)'}")


def mime_type_for_format(pil_format: str | None) -> str:
    mime = _PIL_FORMAT_MIME_TYPES.get((pil_format or "").upper())
    if mime is None:
        raise InvalidImageError(f"unsupported image format: {pil_format or '(unknown)'}")
    return mime


def ensure_upload_size(data: bytes) -> None:
    if not data:
        raise InvalidImageError("uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise UploadTooLargeError(
            f"uploaded file exceeds the limit of {settings.max_upload_bytes} bytes"
        )
