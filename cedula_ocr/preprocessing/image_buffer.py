"""Portable pixel buffer for card images.

Wraps an RGBA ``uint8`` numpy array so the cropping and binarization
steps never depend on a particular imaging backend.
"""

import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from cedula_ocr.exceptions import ImageDecodeError
from cedula_ocr.utils.logger import get_logger

logger = get_logger(__name__)

Pixel = tuple[int, int, int, int]


class ImageBuffer:
    """Mutable RGBA image with pixel-level access.

    Args:
        pixels: Array of shape ``(height, width, 4)`` and dtype ``uint8``.

    Raises:
        ValueError: If the array is not an RGBA ``uint8`` image.
    """

    def __init__(self, pixels: np.ndarray) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            raise ValueError(
                f"Expected an (H, W, 4) uint8 array, got {pixels.shape} {pixels.dtype}"
            )
        self.pixels = pixels

    @classmethod
    def from_bytes(cls, data: bytes) -> "ImageBuffer":
        """Decode an encoded image (PNG, JPEG, ...) into an RGBA buffer.

        Args:
            data: Raw encoded image bytes.

        Returns:
            Decoded image buffer.

        Raises:
            ImageDecodeError: If the bytes cannot be decoded as an image.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                rgba = img.convert("RGBA")
                pixels = np.array(rgba, dtype=np.uint8)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"Could not decode image: {exc}") from exc

        logger.debug("Decoded image %dx%d", pixels.shape[1], pixels.shape[0])
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def get_pixel(self, x: int, y: int) -> Pixel:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, rgba: Pixel) -> None:
        self.pixels[y, x] = rgba

    def crop(self, x: int, y: int, width: int, height: int) -> "ImageBuffer":
        """Copy a sub-rectangle into a new buffer.

        Args:
            x: Left edge in pixels.
            y: Top edge in pixels.
            width: Rectangle width in pixels.
            height: Rectangle height in pixels.

        Returns:
            New buffer of size ``width`` x ``height``.

        Raises:
            ValueError: If the rectangle is empty or outside the image.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Crop rectangle is empty: {width}x{height}")
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            raise ValueError(
                f"Crop rectangle ({x}, {y}, {width}, {height}) exceeds "
                f"image size {self.width}x{self.height}"
            )
        return ImageBuffer(self.pixels[y : y + height, x : x + width].copy())

    def copy(self) -> "ImageBuffer":
        return ImageBuffer(self.pixels.copy())

    def to_png_bytes(self) -> bytes:
        """Encode the buffer as PNG."""
        buf = io.BytesIO()
        with Image.fromarray(self.pixels) as img:
            img.save(buf, format="PNG")
        return buf.getvalue()
