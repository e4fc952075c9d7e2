from __future__ import annotations

from io import BytesIO
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from expander.canvas.outpaint import MirrorImageService
from expander.main import app
from expander.session.store import SessionStore, get_session_store


class FakeService:
    """Records calls; expansion delegates to the mirror fill."""

    def __init__(
        self,
        description: str = "A red square on a plain background.",
        *,
        describe_error: Exception | None = None,
        expand_error: Exception | None = None,
    ) -> None:
        self.description = description
        self.describe_error = describe_error
        self.expand_error = expand_error
        self.describe_calls: list[tuple[bytes, str, str]] = []
        self.expand_calls: list[tuple[str, str]] = []
        self.on_describe: Callable[[], None] | None = None
        self.on_expand: Callable[[], None] | None = None

    def describe(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        self.describe_calls.append((image_bytes, mime_type, instruction))
        if self.on_describe is not None:
            self.on_describe()
        if self.describe_error is not None:
            raise self.describe_error
        return self.description

    def expand(self, png_base64: str, instruction: str) -> str:
        self.expand_calls.append((png_base64, instruction))
        if self.on_expand is not None:
            self.on_expand()
        if self.expand_error is not None:
            raise self.expand_error
        return MirrorImageService().expand(png_base64, instruction)


def _image_bytes(
    width: int,
    height: int,
    fmt: str = "PNG",
    color: tuple[int, int, int] = (200, 40, 40),
) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return _image_bytes


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def store(fake_service: FakeService) -> SessionStore:
    return SessionStore(lambda: fake_service, max_sessions=10)


@pytest.fixture
def client(store: SessionStore):
    app.dependency_overrides[get_session_store] = lambda: store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
