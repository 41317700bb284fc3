"""
Request policies consulted before any I/O happens.
"""

import re
from typing import Dict, Sequence

from aws_lambda_powertools import Logger

from errors import InvalidDimensions, UnsupportedFormat
from models import ImageFormat

logger = Logger()

# Matched with fullmatch; line breaks never match
_IMAGE_CONTENT_TYPE = re.compile(r"image/(\w+)(;.*)?", re.ASCII)

SUPPORTED_FORMATS = tuple(fmt.value for fmt in ImageFormat)

# Fixed map used when the key carries the file extension
EXTENSION_FORMATS: Dict[str, ImageFormat] = {
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "webp": ImageFormat.WEBP,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
}


def check_dimensions(width: int, height: int, allowed: Sequence[str]) -> None:
    """
    Enforce the optional dimension allow-list.

    An empty allow-list accepts every size. Otherwise '<width>x<height>' has to
    be one of the configured entries exactly.
    """
    if not allowed:
        return

    requested = f"{width}x{height}"
    if requested not in allowed:
        logger.info(
            "Requested dimensions are not allow-listed",
            extra={"requested": requested, "allowed": list(allowed)},
        )
        raise InvalidDimensions(requested, allowed)


def resolve_format(content_type: str) -> ImageFormat:
    """
    Derive the output format from the original's Content-Type.

    MIME parameters are ignored, so 'image/jpeg; name=x' resolves to JPEG.
    """
    match = _IMAGE_CONTENT_TYPE.fullmatch((content_type or "").lower())
    if match is None:
        raise _unsupported(content_type, "not an image content type")

    token = match.group(1)
    try:
        return ImageFormat(token)
    except ValueError:
        raise _unsupported(content_type, f"unsupported image subtype {token!r}") from None


def resolve_extension(extension: str) -> ImageFormat:
    """Output format for a key that names its extension, e.g. '50x60-img.JPG'."""
    fmt = EXTENSION_FORMATS.get((extension or "").lower())
    if fmt is None:
        detail = f"unsupported file extension {extension!r}"
        logger.warning("Cannot transform asset", extra={"reason": detail})
        raise UnsupportedFormat(
            EXTENSION_FORMATS.keys(), detail, label="file extensions"
        )
    return fmt


def _unsupported(content_type: str, detail: str) -> UnsupportedFormat:
    logger.warning(
        "Cannot transform asset",
        extra={"content_type": content_type, "reason": detail},
    )
    return UnsupportedFormat(SUPPORTED_FORMATS, detail)
