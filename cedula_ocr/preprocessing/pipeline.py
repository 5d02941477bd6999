"""Per-side image preprocessing pipeline for cédula OCR.

Decodes the card image, crops the back side to the address block, and
suppresses the background, measuring quality before and after.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from cedula_ocr.models import NormalizedRegion
from cedula_ocr.utils.config import PreprocessingConfig
from cedula_ocr.utils.logger import get_logger

from .binarize import suppress_background
from .crop import crop_region
from .image_buffer import ImageBuffer

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float
    ink_ratio: float = 0.0


def _to_gray(image: ImageBuffer) -> np.ndarray:
    return cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2GRAY)


def calculate_sharpness(image: ImageBuffer) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image.

    Returns:
        Sharpness score (higher means sharper).
    """
    return float(cv2.Laplacian(_to_gray(image), cv2.CV_64F).var())


def calculate_contrast(image: ImageBuffer) -> float:
    """Calculate image contrast as the standard deviation of gray levels."""
    return float(_to_gray(image).std())


def calculate_ink_ratio(image: ImageBuffer) -> float:
    """Fraction of pixels that are not pure white."""
    if image.width == 0 or image.height == 0:
        return 0.0
    ink = np.any(image.pixels[..., :3] != 255, axis=-1)
    return float(ink.mean())


class PreprocessingPipeline:
    """Card image preprocessing pipeline.

    The front side is thresholded as a whole; the back side is first
    cropped to the address region and thresholded more leniently since
    its print is noisier.

    Args:
        config: Preprocessing configuration with thresholds and region.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process_front(self, data: bytes) -> tuple[ImageBuffer, QualityMetrics]:
        """Decode and preprocess a front-side image.

        Raises:
            ImageDecodeError: If ``data`` is not a decodable image.
        """
        image = ImageBuffer.from_bytes(data)
        return self.process(image, self.config.front_threshold)

    def process_back(self, data: bytes) -> tuple[ImageBuffer, QualityMetrics]:
        """Decode, crop to the address block and preprocess a back-side image.

        Raises:
            ImageDecodeError: If ``data`` is not a decodable image.
        """
        image = ImageBuffer.from_bytes(data)
        return self.process(
            image,
            self.config.back_threshold,
            region=self.config.address_region,
        )

    def process(
        self,
        image: ImageBuffer,
        threshold: int,
        region: NormalizedRegion | None = None,
    ) -> tuple[ImageBuffer, QualityMetrics]:
        """Run cropping and background suppression on a decoded image.

        Args:
            image: Decoded card image.
            threshold: Luminance threshold for background suppression.
            region: Optional region to crop to before thresholding.

        Returns:
            Tuple of (processed_image, quality_metrics).
        """
        if region is not None:
            image = crop_region(image, region)

        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = suppress_background(image, threshold)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)
        metrics.ink_ratio = calculate_ink_ratio(result)

        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f, "
            "ink %.1f%%",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
            metrics.ink_ratio * 100,
        )
        return result, metrics
