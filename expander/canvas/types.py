from __future__ import annotations

import base64
import enum
from dataclasses import dataclass


class Anchor(int, enum.Enum):
    START = 0
    CENTER = 1
    END = 2


@dataclass(frozen=True, slots=True)
class AspectRatio:
    w: int
    h: int
    label: str = ""

    @property
    def value(self) -> str:
        return f"{self.w}:{self.h}"

    @classmethod
    def parse(cls, value: str) -> AspectRatio:
        for ratio in ASPECT_RATIOS:
            if ratio.value == value.strip():
                return ratio
        raise ValueError(f"unsupported aspect ratio: {value}")


ASPECT_RATIOS: tuple[AspectRatio, ...] = (
    AspectRatio(16, 9, "16:9 Landscape"),
    AspectRatio(9, 16, "9:16 Portrait"),
    AspectRatio(1, 1, "1:1 Square"),
    AspectRatio(4, 3, "4:3 Standard"),
    AspectRatio(3, 4, "3:4 Standard portrait"),
    AspectRatio(3, 2, "3:2 Photo"),
    AspectRatio(2, 3, "2:3 Photo portrait"),
    AspectRatio(21, 9, "21:9 Cinematic"),
)
DEFAULT_ASPECT_RATIO = ASPECT_RATIOS[0]


@dataclass(frozen=True, slots=True)
class Alignment:
    """Anchor of the source image: `row` is vertical, `col` horizontal."""

    row: Anchor = Anchor.CENTER
    col: Anchor = Anchor.CENTER

    def __post_init__(self) -> None:
        # Accept plain 0/1/2 as well; anything else raises ValueError.
        object.__setattr__(self, "row", Anchor(self.row))
        object.__setattr__(self, "col", Anchor(self.col))

    @property
    def label(self) -> str:
        vertical = {Anchor.START: "Top", Anchor.CENTER: "Center", Anchor.END: "Bottom"}[self.row]
        horizontal = {Anchor.START: "Left", Anchor.CENTER: "Center", Anchor.END: "Right"}[self.col]
        return f"{vertical} {horizontal}"


DEFAULT_ALIGNMENT = Alignment()

MIN_SCALE = 0.3
MAX_SCALE = 1.0
SCALE_STEP = 0.05
DEFAULT_SCALE = 1.0


@dataclass(frozen=True, slots=True)
class Placement:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class CompositionPlan:
    canvas_width: int
    canvas_height: int
    placement: Placement
    base_ratio: float
    final_ratio: float


@dataclass(frozen=True, slots=True)
class SourceImage:
    data: bytes
    mime_type: str
    width: int
    height: int
    file_name: str

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True, slots=True)
class ExpandedImage:
    data: bytes
    width: int
    height: int
    created_at_ms: int

    @property
    def data_uri(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.data).decode("ascii")

    @property
    def download_name(self) -> str:
        return f"expanded-image-{self.created_at_ms}.png"
