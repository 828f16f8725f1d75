"""PNG normalisation for downloaded images."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from ideogram_relay.core.errors import TranscodeError

logger = logging.getLogger(__name__)

# Modes the PNG encoder accepts as-is.  Anything else (CMYK, YCbCr, LAB, ...)
# is converted to RGB, or RGBA when it carries transparency.
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def transcode_to_png(data: bytes) -> bytes:
    """Decode arbitrary encoded image bytes and re-encode them as PNG.

    Only the container format changes: no resizing, cropping, or colour
    adjustment is applied.

    Args:
        data: Encoded image bytes (JPEG, WebP, PNG, ...).

    Returns:
        The PNG-encoded image.

    Raises:
        TranscodeError: If ``data`` is empty, cannot be decoded, or exceeds
            Pillow's decompression-bomb pixel limit.
    """
    if not data:
        raise TranscodeError("Image data is empty")

    try:
        with Image.open(io.BytesIO(data)) as image:
            # Force a full decode so truncated files fail here, not on save.
            image.load()
            if image.mode not in _PNG_MODES:
                target = "RGBA" if "transparency" in image.info else "RGB"
                logger.debug("Converting %s image to %s for PNG output.", image.mode, target)
                image = image.convert(target)

            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, ValueError) as exc:
        raise TranscodeError(f"Failed to decode image: {exc}") from exc

    return buffer.getvalue()
