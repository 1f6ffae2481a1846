"""Image transform utilities for cmdgate.

On-the-fly resize and re-encode of blobs served by the router's
``/image`` route.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "avif": "image/avif",
    "webp": "image/webp",
    "jpeg": "image/jpeg",
    "png": "image/png",
}


class ImageTransform(BaseModel):
    """Requested output geometry and encoding."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=100, gt=0, le=4096)
    height: int = Field(default=100, gt=0, le=4096)
    fit: str = Field(default="cover", pattern="^(cover|contain|scale-down|fill)$")
    format: str = Field(default="webp", pattern="^(avif|webp|jpeg|png)$")


def resize(image: Image.Image, transform: ImageTransform) -> Image.Image:
    """Resize an image according to the transform's fit mode.

    - cover: fill the box exactly, cropping the overflow
    - contain: fit inside the box, preserving aspect ratio
    - scale-down: like contain, but never upscale
    - fill: stretch to the box, ignoring aspect ratio
    """
    size = (transform.width, transform.height)
    if transform.fit == "cover":
        return ImageOps.fit(image, size, method=Image.Resampling.LANCZOS)
    if transform.fit == "contain":
        return ImageOps.contain(image, size, method=Image.Resampling.LANCZOS)
    if transform.fit == "scale-down":
        if image.width <= transform.width and image.height <= transform.height:
            return image
        return ImageOps.contain(image, size, method=Image.Resampling.LANCZOS)
    return image.resize(size, Image.Resampling.LANCZOS)


def transform_image(data: bytes, transform: ImageTransform) -> tuple[bytes, str]:
    """Decode, resize and re-encode image bytes.

    Returns:
        (encoded bytes, content type)

    Raises:
        ValueError: If the data is not a decodable image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Failed to decode image: {e}") from e

    if transform.format == "jpeg" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    resized = resize(image, transform)
    buffer = io.BytesIO()
    resized.save(buffer, format=transform.format.upper())
    logger.debug(
        "Transformed image %dx%d -> %dx%d (%s, %s)",
        image.width, image.height, resized.width, resized.height,
        transform.fit, transform.format,
    )
    return buffer.getvalue(), CONTENT_TYPES[transform.format]
