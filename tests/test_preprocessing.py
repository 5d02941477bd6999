"""Tests for image decoding, cropping and background suppression."""

import numpy as np
import pytest

from cedula_ocr.exceptions import ImageDecodeError
from cedula_ocr.models import ADDRESS_REGION, NormalizedRegion
from cedula_ocr.preprocessing.binarize import milli_luminance, suppress_background
from cedula_ocr.preprocessing.crop import crop_region, region_to_pixels
from cedula_ocr.preprocessing.image_buffer import ImageBuffer
from cedula_ocr.preprocessing.pipeline import (
    PreprocessingPipeline,
    QualityMetrics,
    calculate_contrast,
    calculate_ink_ratio,
    calculate_sharpness,
)
from cedula_ocr.utils.config import PreprocessingConfig


def _gray_buffer(gray: np.ndarray) -> ImageBuffer:
    """Wrap a 2-D gray array as an opaque RGBA buffer."""
    alpha = np.full(gray.shape, 255, dtype=np.uint8)
    return ImageBuffer(np.dstack([gray, gray, gray, alpha]))


class TestImageBuffer:
    """Tests for the ImageBuffer pixel container."""

    def test_from_bytes(self, card_png: bytes) -> None:
        image = ImageBuffer.from_bytes(card_png)
        assert image.width == 300
        assert image.height == 200
        assert image.pixels.shape == (200, 300, 4)

    def test_from_bytes_invalid_raises(self) -> None:
        with pytest.raises(ImageDecodeError):
            ImageBuffer.from_bytes(b"definitely not an image")

    def test_from_bytes_empty_raises(self) -> None:
        with pytest.raises(ImageDecodeError):
            ImageBuffer.from_bytes(b"")

    def test_rejects_non_rgba(self) -> None:
        with pytest.raises(ValueError):
            ImageBuffer(np.zeros((5, 5, 3), dtype=np.uint8))

    def test_get_set_pixel(self) -> None:
        image = ImageBuffer(np.zeros((4, 4, 4), dtype=np.uint8))
        image.set_pixel(2, 1, (10, 20, 30, 40))
        assert image.get_pixel(2, 1) == (10, 20, 30, 40)
        assert image.get_pixel(1, 2) == (0, 0, 0, 0)

    def test_crop(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        cropped = image.crop(20, 40, 100, 10)
        assert (cropped.width, cropped.height) == (100, 10)
        assert cropped.get_pixel(0, 0) == (20, 20, 30, 255)

    def test_crop_empty_raises(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        with pytest.raises(ValueError):
            image.crop(0, 0, 0, 10)

    def test_crop_out_of_bounds_raises(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        with pytest.raises(ValueError):
            image.crop(250, 0, 100, 10)

    def test_copy_is_independent(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        clone = image.copy()
        clone.set_pixel(0, 0, (1, 2, 3, 4))
        assert image.get_pixel(0, 0) != (1, 2, 3, 4)

    def test_png_roundtrip_preserves_pixels(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        decoded = ImageBuffer.from_bytes(image.to_png_bytes())
        assert np.array_equal(decoded.pixels, image.pixels)


class TestCrop:
    """Tests for normalized-region cropping."""

    def test_region_to_pixels_floors(self) -> None:
        region = NormalizedRegion(x=0.25, y=0.5, width=0.5, height=0.25)
        assert region_to_pixels(region, 101, 51) == (25, 25, 50, 12)

    def test_full_region_is_identity(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        full = NormalizedRegion(x=0.0, y=0.0, width=1.0, height=1.0)
        cropped = crop_region(image, full)
        assert np.array_equal(cropped.pixels, image.pixels)

    def test_address_region_size(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        _, _, w, h = region_to_pixels(ADDRESS_REGION, image.width, image.height)
        cropped = crop_region(image, ADDRESS_REGION)
        assert (cropped.width, cropped.height) == (w, h)

    def test_empty_region_raises(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        region = NormalizedRegion(x=0.0, y=0.0, width=0.001, height=0.5)
        with pytest.raises(ValueError):
            crop_region(image, region)

    def test_region_validation(self) -> None:
        with pytest.raises(ValueError):
            NormalizedRegion(x=0.5, y=0.5, width=0.6, height=0.1)


class TestBinarize:
    """Tests for luminance thresholding."""

    def test_luminance_weights(self) -> None:
        pixels = np.array([[[255, 0, 0, 255], [0, 255, 0, 255], [0, 0, 255, 255]]],
                          dtype=np.uint8)
        lum = milli_luminance(pixels)
        assert lum.tolist() == [[299 * 255, 587 * 255, 114 * 255]]

    def test_background_whitened_ink_kept(self, card_array: np.ndarray) -> None:
        result = suppress_background(ImageBuffer(card_array), 100)
        assert result.get_pixel(0, 0) == (255, 255, 255, 255)
        assert result.get_pixel(25, 45) == (20, 20, 30, 255)

    def test_source_not_modified(self, card_array: np.ndarray) -> None:
        image = ImageBuffer(card_array)
        suppress_background(image, 100)
        assert image.get_pixel(0, 0) == (180, 210, 240, 255)

    def test_alpha_preserved(self) -> None:
        pixels = np.full((2, 2, 4), 200, dtype=np.uint8)
        pixels[..., 3] = 17
        result = suppress_background(ImageBuffer(pixels), 100)
        assert result.get_pixel(1, 1) == (255, 255, 255, 17)

    def test_threshold_boundary_inclusive(self) -> None:
        levels = np.arange(256, dtype=np.uint8).reshape(1, 256)
        image = _gray_buffer(levels)
        for t in range(256):
            result = suppress_background(image, t)
            assert result.get_pixel(t, 0)[:3] == (255, 255, 255), t
            if t > 0:
                assert result.get_pixel(t - 1, 0)[:3] == (t - 1,) * 3, t

    def test_idempotent(self, card_array: np.ndarray) -> None:
        once = suppress_background(ImageBuffer(card_array), 120)
        twice = suppress_background(once, 120)
        assert np.array_equal(once.pixels, twice.pixels)

    def test_zero_threshold_whitens_everything(self, card_array: np.ndarray) -> None:
        result = suppress_background(ImageBuffer(card_array), 0)
        assert np.all(result.pixels[..., :3] == 255)

    def test_threshold_above_max_keeps_everything(
        self, card_array: np.ndarray
    ) -> None:
        result = suppress_background(ImageBuffer(card_array), 256)
        assert np.array_equal(result.pixels, card_array)


class TestQualityMetrics:
    """Tests for the image quality helpers."""

    def test_sharpness_uniform_is_zero(self) -> None:
        image = _gray_buffer(np.full((50, 50), 128, dtype=np.uint8))
        assert calculate_sharpness(image) == pytest.approx(0.0)

    def test_sharpness_edges_positive(self, card_array: np.ndarray) -> None:
        assert calculate_sharpness(ImageBuffer(card_array)) > 0

    def test_contrast_uniform_is_zero(self) -> None:
        image = _gray_buffer(np.full((50, 50), 128, dtype=np.uint8))
        assert calculate_contrast(image) == pytest.approx(0.0)

    def test_ink_ratio(self) -> None:
        pixels = np.full((10, 10), 255, dtype=np.uint8)
        pixels[:5] = 0
        image = _gray_buffer(pixels)
        assert calculate_ink_ratio(image) == pytest.approx(0.5)


class TestPreprocessingPipeline:
    """Tests for the per-side preprocessing pipeline."""

    def test_process_front(self, card_png: bytes) -> None:
        pipeline = PreprocessingPipeline(PreprocessingConfig())
        result, metrics = pipeline.process_front(card_png)

        assert isinstance(metrics, QualityMetrics)
        assert (result.width, result.height) == (300, 200)
        assert result.get_pixel(0, 0) == (255, 255, 255, 255)
        assert 0.0 < metrics.ink_ratio < 1.0
        assert metrics.contrast_after > 0

    def test_process_back_crops_to_region(self, card_png: bytes) -> None:
        config = PreprocessingConfig()
        pipeline = PreprocessingPipeline(config)
        result, _ = pipeline.process_back(card_png)

        _, _, w, h = region_to_pixels(config.address_region, 300, 200)
        assert (result.width, result.height) == (w, h)

    def test_process_invalid_bytes_raises(self) -> None:
        pipeline = PreprocessingPipeline(PreprocessingConfig())
        with pytest.raises(ImageDecodeError):
            pipeline.process_front(b"\x00\x01\x02")

    def test_custom_threshold_keeps_background(self, card_png: bytes) -> None:
        config = PreprocessingConfig(front_threshold=256)
        pipeline = PreprocessingPipeline(config)
        result, metrics = pipeline.process_front(card_png)
        assert result.get_pixel(0, 0) == (180, 210, 240, 255)
        assert metrics.ink_ratio == pytest.approx(1.0)
