"""Exception classes for cédula extraction.

``ImageDecodeError`` is raised. Date and name errors are carried inside
``Failure`` outcomes by the parsers and surface as the ``error`` string
of the extracted record.
"""


class IdExtractionError(Exception):
    """Base exception for ID card extraction errors."""


class ImageDecodeError(IdExtractionError):
    """Raised when a source image cannot be decoded."""


class DateComponentError(IdExtractionError):
    """A day, month or year capture failed validation.

    Args:
        component: ``"day"``, ``"month"`` or ``"year"``.
        raw: The raw text captured for the component.
        reason: Short description of the failed check.
    """

    def __init__(self, component: str, raw: str, reason: str) -> None:
        self.component = component
        self.raw = raw
        self.reason = reason
        super().__init__(
            f"Could not read date of birth, {component} {reason}: '{raw}'. "
            "Please enter the date of birth manually."
        )


class NameExtractionError(IdExtractionError):
    """No confident first/last name lines were found."""

    def __init__(self) -> None:
        super().__init__(
            "Could not extract first and last name from the image. "
            "Please enter them manually."
        )
