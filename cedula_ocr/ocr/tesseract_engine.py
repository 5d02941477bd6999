"""Tesseract OCR engine wrapper.

Provides plain-text extraction with an average word confidence score
and an async entry point that keeps the event loop free while
Tesseract runs.
"""

import asyncio
import io
from dataclasses import dataclass

import pytesseract
from PIL import Image

from cedula_ocr.exceptions import ImageDecodeError
from cedula_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """OCR result for a single card side."""

    text: str
    language: str
    confidence: float


class TesseractEngine:
    """Wrapper around Tesseract OCR for card text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "spa",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def extract_text(self, image: bytes, lang: str | None = None) -> OCRResult:
        """Extract text from an encoded image.

        Args:
            image: Encoded image bytes.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult containing the full text and average confidence.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"

        try:
            pil_image = Image.open(io.BytesIO(image))
        except OSError as exc:
            raise ImageDecodeError(f"Could not decode image for OCR: {exc}") from exc

        with pil_image:
            try:
                pil_image.load()
            except OSError as exc:
                raise ImageDecodeError(
                    f"Could not decode image for OCR: {exc}"
                ) from exc

            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = (
            sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
        )

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            len(confidences),
            avg_conf,
        )
        return OCRResult(text=text, language=lang, confidence=avg_conf)

    async def recognize(self, image: bytes, lang: str) -> str:
        """Run :meth:`extract_text` in a worker thread and return the text."""
        result = await asyncio.to_thread(self.extract_text, image, lang)
        return result.text
