import pytest
from PIL import Image

from expander.canvas.source import load_source_image
from expander.config import settings
from expander.errors import InvalidImageError, UploadTooLargeError


@pytest.mark.parametrize(
    "fmt, content_type, expected",
    [
        ("PNG", "image/png", "image/png"),
        ("JPEG", "image/jpeg", "image/jpeg"),
        ("WEBP", "image/webp", "image/webp"),
        ("JPEG", "image/jpg", "image/jpeg"),
    ],
)
def test_accepts_supported_formats(image_bytes, fmt, content_type, expected):
    source = load_source_image(image_bytes(320, 200, fmt=fmt), content_type, "pic")

    assert (source.width, source.height) == (320, 200)
    assert source.mime_type == expected
    assert source.data_uri.startswith(f"data:{expected};base64,")


def test_falls_back_to_extension_for_generic_content_type(image_bytes):
    source = load_source_image(image_bytes(10, 10), "application/octet-stream", "x.png")

    assert source.mime_type == "image/png"


def test_decoded_format_wins_over_label(image_bytes):
    source = load_source_image(image_bytes(10, 10, fmt="JPEG"), "image/png", "wrong.png")

    assert source.mime_type == "image/jpeg"


def test_sanitizes_file_name(image_bytes):
    source = load_source_image(image_bytes(10, 10), "image/png", "../../my holiday pic.png")

    assert source.file_name == "my_holiday_pic.png"


def test_rejects_unsupported_type(image_bytes):
    with pytest.raises(InvalidImageError):
        load_source_image(image_bytes(10, 10, fmt="GIF"), "image/gif", "anim.gif")


def test_rejects_unsupported_decoded_format(image_bytes):
    with pytest.raises(InvalidImageError):
        load_source_image(image_bytes(10, 10, fmt="BMP"), "image/png", "fake.png")


def test_rejects_undecodable_data():
    with pytest.raises(InvalidImageError):
        load_source_image(b"definitely not an image", "image/png", "broken.png")


def test_rejects_empty_upload():
    with pytest.raises(InvalidImageError):
        load_source_image(b"", "image/png", "empty.png")


def test_rejects_oversized_upload(image_bytes, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)

    with pytest.raises(UploadTooLargeError):
        load_source_image(image_bytes(10, 10), "image/png", "big.png")


def test_rejects_decompression_bomb(image_bytes, monkeypatch):
    data = image_bytes(100, 100)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(InvalidImageError):
        load_source_image(data, "image/png", "bomb.png")
