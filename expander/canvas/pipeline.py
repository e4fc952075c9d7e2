from __future__ import annotations

import logging
import time

from expander.canvas.compositor import compose_canvas, decode_png_base64, encode_png_base64
from expander.canvas.outpaint import ImageAIService
from expander.canvas.planner import plan_composition
from expander.canvas.types import Alignment, AspectRatio, ExpandedImage, SourceImage
from expander.errors import CompositionError, DescriptionFailed, ExpansionFailed


logger = logging.getLogger(__name__)

DESCRIBE_INSTRUCTION = (
    "Describe this image in a detailed, single paragraph, suitable for an image "
    "generation prompt. Focus on the style, subject, and composition."
)

# "visible image" rather than "central": the source may sit at any anchor.
EXPAND_INSTRUCTION_TEMPLATE = (
    "Creatively expand the visible image to fill the surrounding transparent areas. "
    "Maintain the original image's style, lighting, and subject matter. "
    "The original is about: {description}"
)


def build_expansion_prompt(description: str) -> str:
    return EXPAND_INSTRUCTION_TEMPLATE.format(description=description)


def describe_source(service: ImageAIService, source: SourceImage) -> str:
    logger.info(
        "requesting description for %s (%dx%d, %s)",
        source.file_name,
        source.width,
        source.height,
        source.mime_type,
    )
    try:
        text = service.describe(source.data, source.mime_type, DESCRIBE_INSTRUCTION)
    except Exception as exc:  # noqa: BLE001 - remote service error path
        raise DescriptionFailed(f"description request failed: {exc}") from exc

    if not isinstance(text, str) or not text.strip():
        raise DescriptionFailed("description service returned no text")
    return text.strip()


def expand_source(
    service: ImageAIService,
    source: SourceImage,
    description: str,
    *,
    aspect_ratio: AspectRatio,
    alignment: Alignment,
    scale: float,
) -> ExpandedImage:
    try:
        plan = plan_composition(source.width, source.height, aspect_ratio, alignment, scale)
        composite = compose_canvas(source, plan)
        payload = encode_png_base64(composite)
    except (CompositionError, ValueError) as exc:
        raise ExpansionFailed(f"failed to prepare canvas: {exc}") from exc

    logger.info(
        "requesting expansion to %dx%d (%s), placement=%s",
        plan.canvas_width,
        plan.canvas_height,
        aspect_ratio.value,
        plan.placement,
    )
    try:
        result_b64 = service.expand(payload, build_expansion_prompt(description))
    except Exception as exc:  # noqa: BLE001 - remote service error path
        raise ExpansionFailed(f"expansion request failed: {exc}") from exc

    if not isinstance(result_b64, str) or not result_b64:
        raise ExpansionFailed("expansion service returned no image")
    try:
        return decode_png_base64(result_b64, created_at_ms=int(time.time() * 1000))
    except CompositionError as exc:
        raise ExpansionFailed(f"expansion service returned an unreadable image: {exc}") from exc
