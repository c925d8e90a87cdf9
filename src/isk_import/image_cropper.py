"""
Screenshot cropping
===================

Donation screenshots have a fixed two-column layout and only the left
column carries the log text, so the right half is cut away before the
image is sent for OCR.
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from isk_import.errors import ImageDecodeError

# Modes the PNG encoder can write as-is
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def crop_box(width: int, height: int) -> Tuple[int, int, int, int]:
    """Left half, full height, anchored at the top-left corner."""
    return (0, 0, width // 2, height)


def crop_left_half(image_bytes: bytes) -> bytes:
    """
    Decode a raster image, keep its left half and re-encode it as PNG.

    Args:
        image_bytes: Raw image content (PNG, JPEG or any format Pillow reads).

    Returns:
        PNG bytes of width floor(W / 2) and height H.

    Raises:
        ImageDecodeError: If the content is not a decodable image or is too
            narrow to leave anything after cropping.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.load()
            width, height = img.size
            if width // 2 < 1 or height < 1:
                raise ImageDecodeError(f"Image too small to crop: {width}x{height}")

            cropped = img.crop(crop_box(width, height))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Unable to decode image: {e}") from e

    if cropped.mode not in _PNG_MODES:
        cropped = cropped.convert("RGB")

    buf = io.BytesIO()
    cropped.save(buf, format="PNG")
    return buf.getvalue()
