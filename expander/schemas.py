from pydantic import BaseModel, Field

from expander.canvas.types import MAX_SCALE, MIN_SCALE, Anchor
from expander.session.state import AppState


class AlignmentModel(BaseModel):
    row: Anchor = Anchor.CENTER
    col: Anchor = Anchor.CENTER


class AspectRatioResponse(BaseModel):
    value: str
    label: str
    w: int
    h: int


class AspectRatioListResponse(BaseModel):
    default: str
    items: list[AspectRatioResponse]


class DescriptionUpdateRequest(BaseModel):
    description: str


class CompositionUpdateRequest(BaseModel):
    aspect_ratio: str | None = None
    alignment: AlignmentModel | None = None
    scale: float | None = Field(default=None, ge=MIN_SCALE, le=MAX_SCALE)


class CompositionPlanRequest(BaseModel):
    source_width: int = Field(gt=0)
    source_height: int = Field(gt=0)
    aspect_ratio: str = "16:9"
    alignment: AlignmentModel = Field(default_factory=AlignmentModel)
    scale: float = Field(default=1.0, ge=MIN_SCALE, le=MAX_SCALE)


class PlacementResponse(BaseModel):
    x: float
    y: float
    width: float
    height: float


class CompositionPlanResponse(BaseModel):
    canvas_width: int
    canvas_height: int
    placement: PlacementResponse
    base_ratio: float
    final_ratio: float


class SourceImageResponse(BaseModel):
    file_name: str
    mime_type: str
    width: int
    height: int
    preview_url: str


class ExpandedImageResponse(BaseModel):
    width: int
    height: int
    file_name: str
    result_url: str
    download_url: str


class SessionResponse(BaseModel):
    id: str
    state: AppState
    description: str
    aspect_ratio: str
    alignment: AlignmentModel
    scale: float
    can_generate: bool
    error_message: str | None = None
    source: SourceImageResponse | None = None
    result: ExpandedImageResponse | None = None
