"""Two-sided ID card processing pipeline.

Runs preprocessing, OCR and side-specific parsing for the front and,
when supplied, the back of a cédula, and merges both partial records.
"""

import asyncio
import logging

from cedula_ocr.extraction.back_parser import BackSideParser
from cedula_ocr.extraction.front_parser import FrontSideParser
from cedula_ocr.models import ExtractedIdData, IdImage
from cedula_ocr.preprocessing.pipeline import PreprocessingPipeline
from cedula_ocr.utils.config import AppConfig
from cedula_ocr.utils.logger import get_logger

from .engine import OCREngine
from .tesseract_engine import TesseractEngine


class IdCardProcessor:
    """End-to-end cédula extraction pipeline.

    The front and back are processed one after the other, front first.
    Fields read from the back are applied on top of the front record,
    so when both sides report an error the back-side error is the one
    returned.

    Args:
        config: Application configuration. Defaults are used when ``None``.
        ocr_engine: Text-recognition engine. Defaults to Tesseract
            configured from ``config.ocr``.
        logger: Logger receiving the pipeline trace; passed on to the
            parsers.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        ocr_engine: OCREngine | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.logger = logger or get_logger(__name__)
        self.preprocessing = PreprocessingPipeline(self.config.preprocessing)
        self.ocr_engine = ocr_engine or TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            default_lang=self.config.ocr.default_lang,
            psm=self.config.ocr.psm,
        )
        self.front_parser = FrontSideParser(self.config.extraction, self.logger)
        self.back_parser = BackSideParser(self.config.extraction, self.logger)

    async def extract(
        self, front: IdImage, back: IdImage | None = None
    ) -> ExtractedIdData:
        """Extract identity fields from one or both sides of a card.

        Args:
            front: Front-side image (name, cédula number, date of birth).
            back: Optional back-side image (residential address).

        Returns:
            Merged partial record.

        Raises:
            ImageDecodeError: If either image cannot be decoded.
        """
        self.logger.info("Processing front side: %s (%s)", front.name, front.mime_type)
        front_text = await self.read_front(front)
        result = self.front_parser.parse(front_text)

        if back is not None:
            self.logger.info(
                "Processing back side: %s (%s)", back.name, back.mime_type
            )
            back_text = await self.read_back(back)
            result = result.merge(self.back_parser.parse(back_text))

        self.logger.info(
            "Extracted fields: %s", sorted(result.as_form_fields().keys())
        )
        return result

    async def read_front(self, image: IdImage) -> str:
        """Preprocess the front image and return its OCR text."""
        processed, _ = await asyncio.to_thread(
            self.preprocessing.process_front, image.data
        )
        return await self._recognize(processed.to_png_bytes())

    async def read_back(self, image: IdImage) -> str:
        """Crop and preprocess the back image and return its OCR text."""
        processed, _ = await asyncio.to_thread(
            self.preprocessing.process_back, image.data
        )
        return await self._recognize(processed.to_png_bytes())

    async def _recognize(self, png: bytes) -> str:
        text = await self.ocr_engine.recognize(png, self.config.ocr.default_lang)
        self.logger.debug("Raw OCR text:\n%s", text)
        return text
