from __future__ import annotations

from expander.canvas.types import (
    MAX_SCALE,
    MIN_SCALE,
    Alignment,
    Anchor,
    AspectRatio,
    CompositionPlan,
    Placement,
)


MAX_DIMENSION = 1280


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def canvas_size(aspect_ratio: AspectRatio) -> tuple[int, int]:
    """Longer side is always MAX_DIMENSION, the other one follows the ratio."""
    if aspect_ratio.w <= 0 or aspect_ratio.h <= 0:
        raise ValueError(f"aspect ratio must be positive: {aspect_ratio.value}")
    if aspect_ratio.w >= aspect_ratio.h:
        return MAX_DIMENSION, _round_half_up(MAX_DIMENSION * aspect_ratio.h, aspect_ratio.w)
    return _round_half_up(MAX_DIMENSION * aspect_ratio.w, aspect_ratio.h), MAX_DIMENSION


def _offset(anchor: Anchor, canvas_extent: int, draw_extent: float) -> float:
    if anchor == Anchor.CENTER:
        return (canvas_extent - draw_extent) / 2
    if anchor == Anchor.END:
        return canvas_extent - draw_extent
    return 0.0


def plan_composition(
    source_width: int,
    source_height: int,
    aspect_ratio: AspectRatio,
    alignment: Alignment,
    scale: float,
) -> CompositionPlan:
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"source size must be positive: {source_width}x{source_height}")
    if not MIN_SCALE <= scale <= MAX_SCALE:
        raise ValueError(f"scale must be within [{MIN_SCALE}, {MAX_SCALE}]: {scale}")

    canvas_w, canvas_h = canvas_size(aspect_ratio)

    # Contain-fit, then shrink by the user scale to leave room for expansion.
    base_ratio = min(canvas_w / source_width, canvas_h / source_height)
    final_ratio = base_ratio * scale
    draw_w = source_width * final_ratio
    draw_h = source_height * final_ratio

    placement = Placement(
        x=_offset(alignment.col, canvas_w, draw_w),
        y=_offset(alignment.row, canvas_h, draw_h),
        width=draw_w,
        height=draw_h,
    )
    return CompositionPlan(
        canvas_width=canvas_w,
        canvas_height=canvas_h,
        placement=placement,
        base_ratio=base_ratio,
        final_ratio=final_ratio,
    )
