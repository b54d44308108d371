"""Inline image encoding for drawings and cover images.

Images are embedded as base64 data URLs. Resizing is not done here;
files above the byte bound are refused instead.
"""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from core.constants import DEFAULT_MAX_IMAGE_BYTES
from core.errors import AnglesImageError


def encode_image_file(image_path: Path, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> str:
    """Encode a local image file as an inline image reference.

    Args:
        image_path: Image file to embed.
        max_bytes: Largest accepted file size.

    Returns:
        ``data:image/...;base64,...`` reference.

    Raises:
        AnglesImageError: If the file is not an image, unreadable, or too large.
    """
    mime_type, _ = mimetypes.guess_type(image_path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        raise AnglesImageError(f"Not an image: {image_path}. Use a PNG, JPEG, GIF, or WebP file.")
    try:
        image_bytes = image_path.read_bytes()
    except OSError as error:
        raise AnglesImageError(f"Failed to load image {image_path}: {error}.") from error
    if len(image_bytes) > max_bytes:
        raise AnglesImageError(
            f"Image {image_path} is {len(image_bytes)} bytes (max {max_bytes}). "
            "Compress or resize it before attaching."
        )
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
