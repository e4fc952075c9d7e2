from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from expander.canvas.types import SourceImage
from expander.errors import InvalidImageError
from expander.security.upload_guard import (
    ensure_upload_size,
    mime_type_for_format,
    resolve_mime_type,
    safe_file_name,
)


def load_source_image(data: bytes, content_type: str | None, file_name: str | None) -> SourceImage:
    ensure_upload_size(data)
    resolve_mime_type(content_type, file_name)

    try:
        with Image.open(BytesIO(data)) as img:
            detected = mime_type_for_format(img.format)
            img.load()
            width, height = ImageOps.exif_transpose(img).size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise InvalidImageError(f"failed to decode image: {exc}") from exc

    if width <= 0 or height <= 0:
        raise InvalidImageError(f"image has no pixels: {width}x{height}")

    # The decoded format wins over a mislabelled upload.
    return SourceImage(
        data=data,
        mime_type=detected,
        width=width,
        height=height,
        file_name=safe_file_name(file_name),
    )
