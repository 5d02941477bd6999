"""Background suppression for card images.

Keeps only dark ink by forcing every pixel at or above a luminance
threshold to white, which removes the card's colored security print
before OCR.
"""

import numpy as np

from cedula_ocr.utils.logger import get_logger

from .image_buffer import ImageBuffer

logger = get_logger(__name__)

_BT601_MILLI_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)


def milli_luminance(pixels: np.ndarray) -> np.ndarray:
    """Compute ITU-R BT.601 luminance for every pixel, scaled by 1000.

    Integer weights keep the comparison against an integer threshold
    exact: a gray pixel of level ``t`` has a value of exactly ``1000 * t``.

    Args:
        pixels: RGB or RGBA array of shape ``(H, W, C)``.

    Returns:
        Integer array of shape ``(H, W)``.
    """
    return pixels[..., :3].astype(np.int64) @ _BT601_MILLI_WEIGHTS


def suppress_background(image: ImageBuffer, threshold: int) -> ImageBuffer:
    """Whiten every pixel whose luminance is at or above ``threshold``.

    Alpha is preserved and darker pixels are left untouched, so applying
    the same threshold twice gives the same result as applying it once.

    Args:
        image: Source image.
        threshold: Brightness cutoff; higher values keep more ink.

    Returns:
        New image with the background suppressed.
    """
    result = image.copy()
    mask = milli_luminance(result.pixels) >= threshold * 1000
    result.pixels[mask, :3] = 255
    logger.debug(
        "Suppressed background at threshold %d (%d of %d pixels whitened)",
        threshold,
        int(mask.sum()),
        mask.size,
    )
    return result
