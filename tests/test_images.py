"""Tests for photo normalization."""

import io

from PIL import Image

from registration_desk.services.images import (
    ImageNormalizer,
    detect_mime_type,
    from_data_url,
    to_data_url,
)
from tests.conftest import make_image


def test_wide_image_is_scaled_to_max_width() -> None:
    photo = ImageNormalizer().normalize(make_image(1600, 1200))

    assert photo is not None
    assert photo.width == 400
    assert photo.height == 300
    assert photo.content_type == "image/jpeg"
    with Image.open(io.BytesIO(photo.content)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (400, 300)


def test_narrow_image_keeps_dimensions() -> None:
    photo = ImageNormalizer().normalize(make_image(120, 200))

    assert photo is not None
    assert (photo.width, photo.height) == (120, 200)


def test_png_with_alpha_is_reencoded_as_jpeg() -> None:
    photo = ImageNormalizer(max_width=100).normalize(
        make_image(300, 150, image_format="PNG")
    )

    assert photo is not None
    assert (photo.width, photo.height) == (100, 50)
    assert detect_mime_type(photo.content) == "image/jpeg"


def test_undecodable_bytes_return_none() -> None:
    assert ImageNormalizer().normalize(b"not an image") is None


def test_data_url_round_trip() -> None:
    content = make_image(10, 10)

    url = to_data_url(content)

    assert url.startswith("data:image/jpeg;base64,")
    assert from_data_url(url) == content
    assert from_data_url("data:image/jpeg;base64,***") is None


def test_exif_orientation_is_applied_before_resize() -> None:
    exif = Image.Exif()
    exif[0x0112] = 6
    buffer = io.BytesIO()
    Image.new("RGB", (800, 600), color=(10, 120, 200)).save(
        buffer, format="JPEG", exif=exif
    )

    photo = ImageNormalizer().normalize(buffer.getvalue())

    assert photo is not None
    assert (photo.width, photo.height) == (400, 533)
