from __future__ import annotations

import enum
import logging
import threading
import uuid

from expander.canvas.outpaint import ImageAIService
from expander.canvas.pipeline import describe_source, expand_source
from expander.canvas.planner import plan_composition
from expander.canvas.source import load_source_image
from expander.canvas.types import (
    DEFAULT_ALIGNMENT,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_SCALE,
    MAX_SCALE,
    MIN_SCALE,
    Alignment,
    AspectRatio,
    CompositionPlan,
    ExpandedImage,
    SourceImage,
)
from expander.errors import DescriptionFailed, ExpansionFailed, SessionStateError


logger = logging.getLogger(__name__)

DESCRIPTION_ERROR_MESSAGE = "Could not generate a description for the image. Please try another one."
EXPANSION_ERROR_MESSAGE = (
    "Failed to expand the image. The model might not support this type of edit. Please try again."
)


class AppState(str, enum.Enum):
    IDLE = "idle"
    DESCRIBING = "describing"
    READY = "ready"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"


class ExpanderSession:
    """One user's upload, describe, compose and expand flow.

    Remote calls run outside the lock. Each one captures the request token
    when it starts and its result is applied only if the token is unchanged,
    so a reset or a new upload silently discards late responses.
    """

    def __init__(self, service: ImageAIService, session_id: str | None = None) -> None:
        self.id = session_id or uuid.uuid4().hex
        self._service = service
        self._lock = threading.Lock()
        self._token = 0
        self._pending_token: int | None = None

        self.state = AppState.IDLE
        self.source: SourceImage | None = None
        self.description = ""
        self.aspect_ratio: AspectRatio = DEFAULT_ASPECT_RATIO
        self.alignment: Alignment = DEFAULT_ALIGNMENT
        self.scale: float = DEFAULT_SCALE
        self.expanded: ExpandedImage | None = None
        self.error_message = ""

    @property
    def request_token(self) -> int:
        return self._token

    def _fail(self, message: str) -> None:
        self.error_message = message
        self.state = AppState.ERROR

    def reset(self) -> None:
        with self._lock:
            self._token += 1
            self._pending_token = None
            self.source = None
            self.description = ""
            self.aspect_ratio = DEFAULT_ASPECT_RATIO
            self.alignment = DEFAULT_ALIGNMENT
            self.scale = DEFAULT_SCALE
            self.expanded = None
            self.error_message = ""
            self.state = AppState.IDLE
        logger.info("session %s reset", self.id)

    def select_file(self, data: bytes, content_type: str | None, file_name: str | None) -> SourceImage:
        source = load_source_image(data, content_type, file_name)
        with self._lock:
            self._token += 1
            self._pending_token = None
            self.source = source
            self.description = ""
            self.expanded = None
            self.error_message = ""
            self.state = AppState.DESCRIBING
        logger.info(
            "session %s accepted %s (%dx%d)", self.id, source.file_name, source.width, source.height
        )
        return source

    def describe(self) -> AppState:
        with self._lock:
            if self.state is not AppState.DESCRIBING or self.source is None:
                return self.state
            if self._pending_token == self._token:
                return self.state
            token = self._token
            self._pending_token = token
            source = self.source

        try:
            text = describe_source(self._service, source)
        except DescriptionFailed as exc:
            logger.warning("session %s description failed: %s", self.id, exc)
            with self._lock:
                if token != self._token:
                    logger.info("session %s dropped stale description failure", self.id)
                    return self.state
                self._pending_token = None
                self._fail(DESCRIPTION_ERROR_MESSAGE)
                return self.state

        with self._lock:
            if token != self._token:
                logger.info("session %s dropped stale description", self.id)
                return self.state
            self._pending_token = None
            self.description = text
            self.state = AppState.READY
            return self.state

    def set_description(self, text: str) -> None:
        with self._lock:
            if self.state is AppState.DESCRIBING:
                raise SessionStateError("description is being generated")
            self.description = text

    def set_composition(
        self,
        *,
        aspect_ratio: AspectRatio | None = None,
        alignment: Alignment | None = None,
        scale: float | None = None,
    ) -> None:
        if scale is not None and not MIN_SCALE <= scale <= MAX_SCALE:
            raise ValueError(f"scale must be within [{MIN_SCALE}, {MAX_SCALE}]: {scale}")
        with self._lock:
            if aspect_ratio is not None:
                self.aspect_ratio = aspect_ratio
            if alignment is not None:
                self.alignment = alignment
            if scale is not None:
                self.scale = float(scale)

    def can_generate(self) -> bool:
        return (
            self.source is not None
            and bool(self.description.strip())
            and self.state in {AppState.READY, AppState.DONE}
        )

    def generate(self) -> bool:
        """Run one expansion. Returns False when the action is not allowed."""
        with self._lock:
            if not self.can_generate():
                return False
            self._token += 1
            token = self._token
            self.state = AppState.GENERATING
            self.expanded = None
            source = self.source
            description = self.description
            aspect_ratio = self.aspect_ratio
            alignment = self.alignment
            scale = self.scale

        try:
            expanded = expand_source(
                self._service,
                source,
                description,
                aspect_ratio=aspect_ratio,
                alignment=alignment,
                scale=scale,
            )
        except Exception as exc:  # noqa: BLE001 - every failure ends in the error state
            if not isinstance(exc, ExpansionFailed):
                logger.exception("session %s expansion raised unexpectedly", self.id)
            logger.warning("session %s expansion failed: %s", self.id, exc)
            with self._lock:
                if token == self._token:
                    self._fail(EXPANSION_ERROR_MESSAGE)
                else:
                    logger.info("session %s dropped stale expansion failure", self.id)
            return True

        with self._lock:
            if token != self._token:
                logger.info("session %s dropped stale expansion", self.id)
                return True
            self.expanded = expanded
            self.state = AppState.DONE
        logger.info("session %s expansion done (%dx%d)", self.id, expanded.width, expanded.height)
        return True

    def plan(self) -> CompositionPlan:
        with self._lock:
            if self.source is None:
                raise SessionStateError("no image has been uploaded")
            return plan_composition(
                self.source.width,
                self.source.height,
                self.aspect_ratio,
                self.alignment,
                self.scale,
            )

    def download(self) -> tuple[str, bytes]:
        expanded = self.expanded
        if expanded is None:
            raise SessionStateError("no expanded image available")
        return expanded.download_name, expanded.data
