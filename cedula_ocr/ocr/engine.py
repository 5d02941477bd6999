"""Contract for the text-recognition collaborator.

Any engine (Tesseract, a cloud API, a test fake) can drive the pipeline
as long as it turns encoded image bytes into newline-delimited text in
top-to-bottom reading order.
"""

from typing import Protocol


class OCREngine(Protocol):
    async def recognize(self, image: bytes, lang: str) -> str:
        """Recognize text in an encoded image.

        Args:
            image: Encoded image bytes (PNG).
            lang: OCR language code, e.g. ``"spa"``.

        Returns:
            UTF-8 text, one recognized line per text line.
        """
        ...
