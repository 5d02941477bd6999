"""Normalized-region cropping for card images."""

import math

from cedula_ocr.models import NormalizedRegion
from cedula_ocr.utils.logger import get_logger

from .image_buffer import ImageBuffer

logger = get_logger(__name__)


def region_to_pixels(
    region: NormalizedRegion, width: int, height: int
) -> tuple[int, int, int, int]:
    """Convert a normalized region to an absolute pixel rectangle.

    Each fraction is multiplied by the image width or height and floored.

    Args:
        region: Region as fractions of the image size.
        width: Source image width in pixels.
        height: Source image height in pixels.

    Returns:
        ``(x, y, width, height)`` in pixels.
    """
    return (
        math.floor(width * region.x),
        math.floor(height * region.y),
        math.floor(width * region.width),
        math.floor(height * region.height),
    )


def crop_region(image: ImageBuffer, region: NormalizedRegion) -> ImageBuffer:
    """Copy the normalized sub-rectangle of an image into a new buffer.

    Args:
        image: Source image.
        region: Region to keep, as fractions of the source size.

    Returns:
        Cropped image.

    Raises:
        ValueError: If the region maps to an empty rectangle.
    """
    x, y, w, h = region_to_pixels(region, image.width, image.height)
    result = image.crop(x, y, w, h)
    logger.debug(
        "Cropped %dx%d image to (%d, %d, %d, %d)",
        image.width,
        image.height,
        x,
        y,
        w,
        h,
    )
    return result
