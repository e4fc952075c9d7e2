from __future__ import annotations

from fastapi import APIRouter, HTTPException

from expander.canvas.planner import plan_composition
from expander.canvas.types import ASPECT_RATIOS, DEFAULT_ASPECT_RATIO, Alignment, AspectRatio, CompositionPlan
from expander.schemas import (
    AspectRatioListResponse,
    AspectRatioResponse,
    CompositionPlanRequest,
    CompositionPlanResponse,
    PlacementResponse,
)


router = APIRouter(tags=["composition"])


def build_plan_response(plan: CompositionPlan) -> CompositionPlanResponse:
    p = plan.placement
    return CompositionPlanResponse(
        canvas_width=plan.canvas_width,
        canvas_height=plan.canvas_height,
        placement=PlacementResponse(x=p.x, y=p.y, width=p.width, height=p.height),
        base_ratio=plan.base_ratio,
        final_ratio=plan.final_ratio,
    )


@router.get("/aspect-ratios", response_model=AspectRatioListResponse)
def list_aspect_ratios() -> AspectRatioListResponse:
    return AspectRatioListResponse(
        default=DEFAULT_ASPECT_RATIO.value,
        items=[
            AspectRatioResponse(value=ar.value, label=ar.label, w=ar.w, h=ar.h)
            for ar in ASPECT_RATIOS
        ],
    )


@router.post("/composition/plan", response_model=CompositionPlanResponse)
def plan_composition_preview(payload: CompositionPlanRequest) -> CompositionPlanResponse:
    try:
        plan = plan_composition(
            payload.source_width,
            payload.source_height,
            AspectRatio.parse(payload.aspect_ratio),
            Alignment(row=payload.alignment.row, col=payload.alignment.col),
            payload.scale,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return build_plan_response(plan)
