"""Domain types shared across the extraction pipeline."""

from dataclasses import dataclass, fields, replace

from pydantic import BaseModel, ConfigDict, Field, model_validator

_FORM_FIELD_NAMES = {
    "first_name": "firstName",
    "last_name": "lastName",
    "cedula_no": "cedulaNo",
    "date_of_birth": "dateOfBirth",
    "address": "address",
    "error": "error",
}


@dataclass(frozen=True)
class IdImage:
    """A caller-supplied card image."""

    data: bytes
    mime_type: str
    name: str = "image"


@dataclass
class ExtractedIdData:
    """Partial identity record produced by one or both card sides.

    Every field is optional; a missing field does not imply an error.
    ``error`` holds the first failure detected, if any.
    """

    first_name: str | None = None
    last_name: str | None = None
    cedula_no: str | None = None
    date_of_birth: str | None = None
    address: str | None = None
    error: str | None = None

    def merge(self, other: "ExtractedIdData") -> "ExtractedIdData":
        """Return a copy with every field set on ``other`` taking precedence.

        Args:
            other: Record applied on top of this one.

        Returns:
            A new merged record.
        """
        overrides = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **overrides)

    def as_form_fields(self) -> dict[str, str]:
        """Return set fields keyed by the intake form's field names."""
        return {
            _FORM_FIELD_NAMES[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


class NormalizedRegion(BaseModel):
    """Sub-rectangle of an image expressed as fractions of its size."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)
    width: float = Field(ge=0.0, le=1.0)
    height: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "NormalizedRegion":
        if self.x + self.width > 1.0 + 1e-9 or self.y + self.height > 1.0 + 1e-9:
            raise ValueError("Region extends past the image bounds")
        return self


# Address block on the back of the card, clear of the barcode and MRZ.
ADDRESS_REGION = NormalizedRegion(x=0.0, y=0.35, width=0.60, height=0.35)
