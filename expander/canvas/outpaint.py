from __future__ import annotations

import base64
from functools import lru_cache
from io import BytesIO
from typing import Protocol

import numpy as np
from google import genai
from google.genai import types
from PIL import Image

from expander.config import settings


class ImageAIService(Protocol):
    def describe(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        """Return a free-text description of the image."""

    def expand(self, png_base64: str, instruction: str) -> str:
        """Return the filled image as a base64 PNG.

        Transparent pixels of the input are the regions to generate.
        """


def _fill_rows(rgba: np.ndarray, mask: np.ndarray) -> None:
    """Replicate the nearest opaque pixel of each row into its masked ends."""
    h, w = mask.shape
    cols = np.arange(w)
    for y in range(h):
        row_mask = mask[y]
        if not row_mask.any():
            continue
        valid_cols = np.where(~row_mask)[0]
        if valid_cols.size == 0:
            continue

        first_valid = int(valid_cols[0])
        last_valid = int(valid_cols[-1])

        left_cols = np.where(row_mask & (cols < first_valid))[0]
        right_cols = np.where(row_mask & (cols > last_valid))[0]

        if left_cols.size > 0:
            rgba[y, left_cols, :] = rgba[y, first_valid, :]
            mask[y, left_cols] = False
        if right_cols.size > 0:
            rgba[y, right_cols, :] = rgba[y, last_valid, :]
            mask[y, right_cols] = False


class MirrorImageService:
    """Non-generative provider for offline use and integration tests.

    Descriptions are derived from simple image statistics and expansion
    mirrors edge pixels into the transparent area.
    """

    def describe(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        _ = instruction
        with Image.open(BytesIO(image_bytes)) as img:
            rgb = np.array(img.convert("RGB"), dtype=np.float32)
        h, w = rgb.shape[:2]
        if w > h:
            orientation = "landscape"
        elif h > w:
            orientation = "portrait"
        else:
            orientation = "square"
        r, g, b = (int(round(c)) for c in rgb.reshape(-1, 3).mean(axis=0))
        return (
            f"A {orientation} {mime_type.split('/')[-1]} image, {w}x{h} pixels, "
            f"dominated by the colour #{r:02x}{g:02x}{b:02x}."
        )

    def expand(self, png_base64: str, instruction: str) -> str:
        _ = instruction
        with Image.open(BytesIO(base64.b64decode(png_base64))) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)

        mask = rgba[:, :, 3] == 0
        if mask.any() and not mask.all():
            _fill_rows(rgba, mask)
            # Rows above and below the source are filled column-wise.
            _fill_rows(rgba.transpose(1, 0, 2), mask.T)

        buffer = BytesIO()
        Image.fromarray(rgba).save(buffer, format="PNG")
        return base64.b64encode(buffer.getvalue()).decode("ascii")


class GeminiImageService:
    """Gemini-backed provider using the google-genai client."""

    def __init__(
        self,
        api_key: str,
        *,
        describe_model: str | None = None,
        expand_model: str | None = None,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._describe_model = describe_model or settings.describe_model
        self._expand_model = expand_model or settings.expand_model

    def describe(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        response = self._client.models.generate_content(
            model=self._describe_model,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                instruction,
            ],
        )
        return response.text or ""

    def expand(self, png_base64: str, instruction: str) -> str:
        response = self._client.models.generate_content(
            model=self._expand_model,
            contents=[
                types.Part.from_bytes(data=base64.b64decode(png_base64), mime_type="image/png"),
                instruction,
            ],
            config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
        )

        for candidate in response.candidates or []:
            if candidate.content is None:
                continue
            for part in candidate.content.parts or []:
                if part.inline_data is not None and part.inline_data.data:
                    return base64.b64encode(part.inline_data.data).decode("ascii")
        raise ValueError("response did not contain an image part")


@lru_cache(maxsize=1)
def _create_cached_gemini_service() -> GeminiImageService:
    if not settings.gemini_api_key:
        raise RuntimeError("GEMINI_API_KEY is not configured")
    return GeminiImageService(settings.gemini_api_key)


def create_default_service() -> ImageAIService:
    provider = settings.ai_provider.lower().strip()

    if provider in {"mirror", "none"}:
        return MirrorImageService()

    if provider == "gemini":
        return _create_cached_gemini_service()

    if provider == "auto" and settings.gemini_api_key:
        return _create_cached_gemini_service()

    return MirrorImageService()
