"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cedula_ocr.models import ExtractedIdData


class ExtractedIdResponse(BaseModel):
    """Extracted card fields, serialized with the intake form's camelCase names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str | None = None
    last_name: str | None = None
    cedula_no: str | None = None
    date_of_birth: str | None = None
    address: str | None = None
    error: str | None = None

    @classmethod
    def from_record(cls, record: ExtractedIdData) -> "ExtractedIdResponse":
        return cls(
            first_name=record.first_name,
            last_name=record.last_name,
            cedula_no=record.cedula_no,
            date_of_birth=record.date_of_birth,
            address=record.address,
            error=record.error,
        )


class ExtractionResponse(BaseModel):
    """Response schema for an ID card extraction request."""

    success: bool
    data: ExtractedIdResponse
    processing_time_ms: float


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
