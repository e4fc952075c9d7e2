from __future__ import annotations

import base64
import binascii
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from expander.canvas.types import CompositionPlan, ExpandedImage, SourceImage
from expander.errors import CompositionError


def decode_image(data: bytes) -> Image.Image:
    """Decode raster bytes, honouring the EXIF orientation like a browser does."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            return oriented.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise CompositionError(f"failed to decode image: {exc}") from exc


def _pixel_rect(plan: CompositionPlan) -> tuple[int, int, int, int]:
    # The source is drawn on whole pixels. Halves round to even.
    p = plan.placement
    w = min(plan.canvas_width, max(1, int(round(p.width))))
    h = min(plan.canvas_height, max(1, int(round(p.height))))
    x = min(max(0, int(round(p.x))), plan.canvas_width - w)
    y = min(max(0, int(round(p.y))), plan.canvas_height - h)
    return x, y, w, h


def compose_canvas(source: SourceImage, plan: CompositionPlan) -> Image.Image:
    """Draw the source at the planned rectangle on a transparent canvas."""
    img = decode_image(source.data)
    x, y, w, h = _pixel_rect(plan)

    canvas = Image.new("RGBA", (plan.canvas_width, plan.canvas_height), (0, 0, 0, 0))
    resized = img.resize((w, h), Image.Resampling.LANCZOS)
    canvas.alpha_composite(resized, dest=(x, y))
    return canvas


def encode_png_base64(image: Image.Image) -> str:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def decode_png_base64(payload: str, *, created_at_ms: int) -> ExpandedImage:
    # Tolerate a full data URI as well as the bare payload.
    if payload.startswith("data:"):
        payload = payload.split(",", 1)[-1]
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CompositionError(f"invalid base64 image payload: {exc}") from exc

    img = decode_image(raw)
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return ExpandedImage(
        data=buffer.getvalue(),
        width=img.width,
        height=img.height,
        created_at_ms=created_at_ms,
    )
