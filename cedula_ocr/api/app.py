"""FastAPI application for the cédula OCR API.

Provides an extraction endpoint for front/back card images and a
health check.
"""

import shutil
import time
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from cedula_ocr.exceptions import ImageDecodeError
from cedula_ocr.models import IdImage
from cedula_ocr.ocr.id_card_processor import IdCardProcessor
from cedula_ocr.utils.config import load_config
from cedula_ocr.utils.logger import get_logger

from .schemas import ExtractedIdResponse, ExtractionResponse, HealthResponse

logger = get_logger(__name__)

app = FastAPI(
    title="Cédula OCR API",
    description="Extract identity fields from Dominican national ID card images",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_processor() -> IdCardProcessor:
    """Build the card processor from the current configuration."""
    return IdCardProcessor(load_config())


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/tiff",
    "image/bmp",
    "application/octet-stream",
}


def _check_content_type(file: UploadFile) -> None:
    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )


async def _to_id_image(file: UploadFile, default_name: str) -> IdImage:
    return IdImage(
        data=await file.read(),
        mime_type=file.content_type or "application/octet-stream",
        name=file.filename or default_name,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.post("/extract", response_model=ExtractionResponse)
async def extract_id_card(
    front: Annotated[UploadFile, File(...)],
    back: Annotated[UploadFile | None, File()] = None,
) -> ExtractionResponse:
    """Extract identity fields from uploaded card images.

    Args:
        front: Front side of the card (required).
        back: Back side of the card, for the address (optional).

    Returns:
        Extracted fields and processing time.
    """
    start_time = time.time()

    _check_content_type(front)
    if back is not None:
        _check_content_type(back)

    try:
        processor = _get_processor()
        front_image = await _to_id_image(front, "front")
        back_image = await _to_id_image(back, "back") if back is not None else None
        record = await processor.extract(front_image, back_image)
    except ImageDecodeError as exc:
        logger.warning("Rejected undecodable image: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ExtractionResponse(
        success=record.error is None,
        data=ExtractedIdResponse.from_record(record),
        processing_time_ms=(time.time() - start_time) * 1000,
    )
