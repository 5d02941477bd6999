"""Address extraction from the back of the cédula.

The residential address sits under a "DIRECCION DE RESIDENCIA" label as
up to three short lines: province, sector and municipality. When the
label is not read, the parser falls back to classifying every
address-like line it can find. A missing address is not an error.
"""

import logging
import re

from cedula_ocr.models import ExtractedIdData
from cedula_ocr.utils.config import ExtractionConfig
from cedula_ocr.utils.logger import get_logger

from .text import (
    LETTERS,
    collapse_whitespace,
    count_letters,
    fold_accents,
    has_letter,
    letter_density_too_low,
    split_lines,
)
from .vocabulary import (
    ADDRESS_ANCHORS,
    ADDRESS_LABEL,
    ADDRESS_PREFIX,
    PROVINCES,
    SECTOR_HINT,
)

_MRZ_LINE = re.compile(r"[A-Z0-9<]+")
_MRZ_FILLER = re.compile(r"<{3,}")
_ANGLES_AND_PIPES = re.compile(r"[<>|]+")
_NON_ADDRESS_CHARS = re.compile(rf"[^{LETTERS}0-9\s,.-]")
_TRAILING_DASH = re.compile(r"\s*-\s*$")


def is_mrz_line(line: str) -> bool:
    """Whether a line looks like part of the machine-readable zone."""
    return (
        len(line) > 20
        and _MRZ_LINE.fullmatch(line) is not None
        and _MRZ_FILLER.search(line) is not None
    )


def is_degenerate(line: str) -> bool:
    """Whether a line is too short or has too few letters to be an address."""
    return len(line) <= 2 or letter_density_too_low(line) or count_letters(line) < 3


def clean_address_line(line: str) -> str | None:
    """Strip label prefixes and stray punctuation from an address line.

    Returns:
        The cleaned component, or ``None`` if nothing usable is left.
    """
    cleaned = ADDRESS_PREFIX.sub("", line)
    cleaned = _ANGLES_AND_PIPES.sub("", cleaned)
    cleaned = _NON_ADDRESS_CHARS.sub("", cleaned)
    cleaned = _TRAILING_DASH.sub("", cleaned)
    cleaned = collapse_whitespace(cleaned)
    if len(cleaned) < 2 or not has_letter(cleaned):
        return None
    return cleaned


def _is_single_word(part: str, min_length: int = 4) -> bool:
    return len(part.split()) == 1 and len(part) >= min_length


class BackSideParser:
    """Parser for OCR text read from the back of the card.

    Args:
        config: Extraction settings. Defaults are used when ``None``.
        logger: Logger receiving the debug trace.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.logger = logger or get_logger(__name__)

    def parse(self, ocr_text: str) -> ExtractedIdData:
        """Extract the residential address from raw OCR text.

        Args:
            ocr_text: Text returned by the OCR engine.

        Returns:
            Record with ``address`` set when any component was found.
        """
        lines = split_lines(ocr_text)
        self.logger.debug("Parsing back side, %d lines", len(lines))

        anchor = self.find_anchor(lines)
        if anchor is not None:
            self.logger.debug("Address anchor at line %d: %r", anchor, lines[anchor])
            following = lines[anchor + 1 : anchor + 1 + self.config.address_lookahead]
            parts = self._collect(following, limit=self.config.max_address_parts)
        else:
            self.logger.debug("No address anchor, classifying all lines")
            parts = self.classify(self._collect(lines))

        result = ExtractedIdData()
        if parts:
            result.address = ", ".join(parts)
            self.logger.info("Extracted address: %s", result.address)
        else:
            self.logger.warning("Could not extract address from back side")
        return result

    @staticmethod
    def find_anchor(lines: list[str]) -> int | None:
        """Index of the address label line, trying the most specific form first."""
        for pattern in ADDRESS_ANCHORS:
            for i, line in enumerate(lines):
                if pattern.search(line):
                    return i
        return None

    def _collect(self, lines: list[str], limit: int | None = None) -> list[str]:
        parts: list[str] = []
        for line in lines:
            if ADDRESS_LABEL.match(line) or is_mrz_line(line) or is_degenerate(line):
                self.logger.debug("Skipping non-address line %r", line)
                continue
            cleaned = clean_address_line(line)
            if cleaned is None or cleaned in parts:
                continue
            parts.append(cleaned)
            if limit is not None and len(parts) >= limit:
                break
        return parts

    def classify(self, candidates: list[str]) -> list[str]:
        """Order unanchored candidates as province, sector, municipality.

        Args:
            candidates: Distinct cleaned address-like lines.

        Returns:
            Up to ``max_address_parts`` components, identified roles
            first, then the remaining candidates in reading order.
        """
        province = next(
            (p for p in candidates if fold_accents(p) in PROVINCES), None
        ) or next((p for p in candidates if _is_single_word(p)), None)

        sector = next(
            (p for p in candidates if p != province and SECTOR_HINT.search(p)), None
        ) or next(
            (p for p in candidates if p != province and _is_single_word(p)), None
        )

        municipality = next(
            (
                p
                for p in candidates
                if len(p.split()) >= 2 and p not in (province, sector)
            ),
            None,
        )

        parts = [p for p in (province, sector, municipality) if p is not None]
        for candidate in candidates:
            if len(parts) >= self.config.max_address_parts:
                break
            if candidate not in parts:
                parts.append(candidate)

        self.logger.debug(
            "Classified address: province=%s sector=%s municipality=%s",
            province,
            sector,
            municipality,
        )
        return parts[: self.config.max_address_parts]
