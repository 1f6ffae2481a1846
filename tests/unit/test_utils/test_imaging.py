"""Tests for image transform utilities."""

from __future__ import annotations

import io

import pytest
from PIL import Image
from pydantic import ValidationError

from cmdgate.utils.imaging import ImageTransform, resize, transform_image


def _png(size: tuple[int, int], mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format="PNG")
    return buffer.getvalue()


class TestResize:
    @pytest.mark.parametrize(
        "fit,expected",
        [
            ("cover", (50, 50)),
            ("contain", (50, 25)),
            ("scale-down", (50, 25)),
            ("fill", (50, 50)),
        ],
    )
    def test_fit_modes(self, fit: str, expected: tuple[int, int]) -> None:
        image = Image.new("RGB", (200, 100))
        out = resize(image, ImageTransform(width=50, height=50, fit=fit))
        assert out.size == expected

    def test_scale_down_never_upscales(self) -> None:
        image = Image.new("RGB", (20, 10))
        out = resize(image, ImageTransform(width=100, height=100, fit="scale-down"))
        assert out.size == (20, 10)


class TestTransformImage:
    def test_png_output(self) -> None:
        data, content_type = transform_image(_png((300, 300)), ImageTransform(format="png"))
        assert content_type == "image/png"
        assert Image.open(io.BytesIO(data)).size == (100, 100)

    def test_jpeg_drops_alpha(self) -> None:
        data, content_type = transform_image(
            _png((64, 64), mode="RGBA"), ImageTransform(width=32, height=32, format="jpeg")
        )
        assert content_type == "image/jpeg"
        assert Image.open(io.BytesIO(data)).mode == "RGB"

    def test_undecodable(self) -> None:
        with pytest.raises(ValueError):
            transform_image(b"garbage", ImageTransform())

    @pytest.mark.parametrize("kwargs", [{"width": 0}, {"height": 5000}, {"fit": "crop"}, {"format": "gif"}])
    def test_invalid_transform(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            ImageTransform(**kwargs)
