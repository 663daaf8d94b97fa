"""
NutriPlan AI — Image Compressor Tool
====================================
Downscales progress photos before they go into the local store.
Longest edge is capped at MAX_DIMENSION, then re-encoded as JPEG.
"""

import base64
import binascii
import io
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
MAX_DIMENSION = 800
JPEG_QUALITY = 70
DATA_URL_PREFIX = "data:image/jpeg;base64,"


class ImageProcessingError(Exception):
    """Raised when a photo cannot be decoded or re-encoded."""


def target_size(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    """Scale (width, height) so the longest edge fits, keeping aspect ratio."""
    if width > height:
        if width > max_dimension:
            height = height * max_dimension / width
            width = max_dimension
    elif height > max_dimension:
        width = width * max_dimension / height
        height = max_dimension
    return max(1, round(width)), max(1, round(height))


def _read_bytes(source: Union[bytes, bytearray, io.IOBase]) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if hasattr(source, "getvalue"):
        return source.getvalue()
    return source.read()


def compress_image(
    source: Union[bytes, bytearray, io.IOBase],
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> str:
    """
    Decode an uploaded photo and return a compressed JPEG data URL.

    Raises:
        ImageProcessingError: the data is not a readable image.
    """
    try:
        raw = _read_bytes(source)
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            width, height = target_size(img.width, img.height, max_dimension)
            rgb = img.convert("RGB")
            if (width, height) != rgb.size:
                rgb = rgb.resize((width, height), Image.LANCZOS)
            out = io.BytesIO()
            rgb.save(out, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        print(f"❌ Image compression failed: {e}")
        raise ImageProcessingError("Could not process the image. Try another photo.") from e

    return DATA_URL_PREFIX + base64.b64encode(out.getvalue()).decode("ascii")


def data_url_to_bytes(data_url: str) -> bytes:
    """Decode a data URL produced by compress_image."""
    _, _, encoded = data_url.partition(",")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageProcessingError("Stored photo is not valid base64") from e
