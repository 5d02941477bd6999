"""Field extraction from the front of the cédula.

Extracts the cédula number, date of birth and the holder's first and
last names from noisy OCR text. Each field is extracted independently;
only the first error detected is reported.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from cedula_ocr.exceptions import DateComponentError, NameExtractionError
from cedula_ocr.models import ExtractedIdData
from cedula_ocr.utils.config import ExtractionConfig
from cedula_ocr.utils.logger import get_logger

from .rules import Failure, Outcome, Rule, Success, accept, first_match
from .text import (
    LETTERS,
    collapse_whitespace,
    letter_density_too_low,
    split_lines,
)
from .vocabulary import MONTH_ALTERNATION, NAME_EXCLUSIONS, resolve_month

_CEDULA_PATTERN = re.compile(r"(?<!\d)(\d{3})[- ]?(\d{7})[- ]?(\d)(?!\d)")

# Month token: 4-12 alphanumerics with at least one letter.
_MONTH_TOKEN = r"((?=[A-Z0-9]*[A-Z])[A-Z0-9]{4,12})"

_DATE_FREE_MONTH = re.compile(rf"\b(\d{{1,2}})[ \t]+{_MONTH_TOKEN}[ \t]+(\d{{2,4}})\b")
_DATE_NAMED_MONTH = re.compile(
    rf"\b(\d{{1,2}})[ \t]+({MONTH_ALTERNATION})[ \t]+(\d{{2,4}})\b"
)
_DATE_LABELLED = re.compile(
    rf"FECHA\s+DE\s+NACIMIENTO[:\s]+(\d{{1,2}})\s+{_MONTH_TOKEN}\s+(\d{{2,4}})\b"
)
_DATE_NUMERIC = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{2,4})\b")

_NAME_NOISE = re.compile(r"[\"«»\-.*+]")
_LEADING_NON_LETTERS = re.compile(f"^[^{LETTERS}]+")
_TRAILING_NON_LETTERS = re.compile(rf"[^{LETTERS}\s]+$")
_LETTERS_ONLY = re.compile(rf"[{LETTERS}\s]+")

_MAX_NAME_LENGTH = 40


@dataclass(frozen=True)
class DateCapture:
    """Raw day/month/year captures with the month already resolved."""

    day: str
    month_raw: str
    month: str | None
    year: str


def _capture_named_month(match: re.Match[str]) -> DateCapture:
    day, month_raw, year = match.groups()
    return DateCapture(day, month_raw, resolve_month(month_raw), year)


def _capture_numeric_month(match: re.Match[str]) -> DateCapture:
    day, month_raw, year = match.groups()
    month = month_raw.zfill(2) if 1 <= int(month_raw) <= 12 else None
    return DateCapture(day, month_raw, month, year)


def clean_name_line(line: str) -> str:
    """Strip OCR noise from a candidate name line.

    Removes quotes, dashes, dots, asterisks and plus signs, any leading
    non-letters and trailing non-letter characters, then collapses
    whitespace and uppercases.
    """
    cleaned = _NAME_NOISE.sub("", line.upper())
    cleaned = _LEADING_NON_LETTERS.sub("", cleaned)
    cleaned = _TRAILING_NON_LETTERS.sub("", cleaned)
    return collapse_whitespace(cleaned)


def is_artifact(cleaned: str) -> bool:
    """Whether a cleaned line is too short or too sparse to be a name."""
    if len(cleaned) <= 2:
        return True
    if letter_density_too_low(cleaned):
        return True
    words = cleaned.split()
    return not words or all(len(w) <= 2 for w in words)


def is_date_line(raw: str) -> bool:
    """Whether a line holds a day, a recognizable month and a year."""
    match = _DATE_FREE_MONTH.search(raw.upper())
    return match is not None and resolve_month(match.group(2)) is not None


def is_excluded(raw: str, cleaned: str) -> bool:
    """Whether a line matches a known non-name pattern or is a date."""
    if is_date_line(raw):
        return True
    return any(p.search(raw) or p.search(cleaned) for p in NAME_EXCLUSIONS)


def _drop_single_letters(line: str) -> str:
    return " ".join(w for w in line.split() if len(w) > 1)


def _split_full_name(line: str) -> tuple[str, str] | None:
    words = [w for w in line.split() if len(w) > 1]
    if len(words) < 2:
        return None
    return words[0], " ".join(words[1:])


class FrontSideParser:
    """Parser for OCR text read from the front of the card.

    Args:
        config: Extraction settings. Defaults are used when ``None``.
        logger: Logger receiving the debug trace. Defaults to this
            module's logger, which is silent unless logging is set up.
        today: Callable returning the current date, used for the upper
            bound on the birth year.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        logger: logging.Logger | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.logger = logger or get_logger(__name__)
        self.today = today

        self.cedula_rules: tuple[Rule, ...] = (
            Rule("cedula", _CEDULA_PATTERN, lambda m: "".join(m.groups()), accept),
        )
        self.date_rules: tuple[Rule, ...] = (
            Rule(
                "date_free_month",
                _DATE_FREE_MONTH,
                _capture_named_month,
                self._validate_date,
            ),
            Rule(
                "date_named_month",
                _DATE_NAMED_MONTH,
                _capture_named_month,
                self._validate_date,
            ),
            Rule(
                "date_labelled",
                _DATE_LABELLED,
                _capture_named_month,
                self._validate_date,
            ),
            Rule(
                "date_numeric",
                _DATE_NUMERIC,
                _capture_numeric_month,
                self._validate_date,
            ),
        )

    def parse(self, ocr_text: str) -> ExtractedIdData:
        """Extract front-side fields from raw OCR text.

        Args:
            ocr_text: Text returned by the OCR engine.

        Returns:
            Partial record with whatever fields could be read, and the
            first error detected.
        """
        text = ocr_text.upper()
        lines = split_lines(ocr_text)
        result = ExtractedIdData()
        self.logger.debug("Parsing front side, %d lines", len(lines))

        cedula = first_match(self.cedula_rules, text, self.logger)
        if isinstance(cedula, Success):
            result.cedula_no = cedula.value

        dob = first_match(self.date_rules, text, self.logger)
        if isinstance(dob, Success):
            result.date_of_birth = dob.value
        elif isinstance(dob, Failure):
            self.logger.warning("Date of birth rejected: %s", dob.message)
            result.error = dob.message

        names = self.extract_names(lines)
        if isinstance(names, Success):
            result.first_name, result.last_name = names.value
        else:
            self.logger.warning(
                "Could not extract name. Last lines: %s",
                lines[-self.config.name_tail_lines :],
            )
            if result.error is None:
                result.error = names.message

        return result

    def _validate_date(self, capture: DateCapture) -> Outcome[str]:
        max_year = self.today().year + 1
        min_year = self.config.min_birth_year

        if len(capture.year) != 4:
            return Failure(DateComponentError("year", capture.year, "not 4 digits"))
        if not min_year <= int(capture.year) <= max_year:
            return Failure(
                DateComponentError(
                    "year", capture.year, f"outside {min_year}-{max_year}"
                )
            )
        if capture.month is None:
            return Failure(
                DateComponentError("month", capture.month_raw, "not recognized")
            )
        # No month-length check: day 31 is accepted for any month.
        if not 1 <= int(capture.day) <= 31:
            return Failure(DateComponentError("day", capture.day, "outside 1-31"))

        return Success(f"{capture.year}-{capture.month}-{capture.day.zfill(2)}")

    def extract_names(self, lines: list[str]) -> Outcome[tuple[str, str]]:
        """Find the first and last name among the trailing OCR lines.

        The holder's names are printed last on the card, first names on
        one line and surnames on the next.

        Args:
            lines: Uppercased, stripped, non-empty OCR lines.

        Returns:
            ``Success((first_name, last_name))`` or a name failure.
        """
        tail = lines[-self.config.name_tail_lines :]
        survivors = []
        for raw in tail:
            cleaned = clean_name_line(raw)
            if is_artifact(cleaned) or len(cleaned) > _MAX_NAME_LENGTH:
                continue
            if is_excluded(raw, cleaned):
                continue
            survivors.append(cleaned)
        self.logger.debug("Name candidates after filtering: %s", survivors)

        if len(survivors) >= 2:
            first, last = (_drop_single_letters(s) for s in survivors[-2:])
            return Success((first, last))

        if len(survivors) == 1:
            split = _split_full_name(survivors[0])
            if split is not None:
                return Success(split)
            return Failure(NameExtractionError())

        return self._names_from_last_lines(lines)

    def _names_from_last_lines(self, lines: list[str]) -> Outcome[tuple[str, str]]:
        last_two = lines[-2:]
        first_raw = last_two[0] if last_two else ""
        second_raw = last_two[1] if len(last_two) > 1 else ""
        self.logger.debug("Falling back to last two lines: %s", last_two)

        first = _drop_single_letters(clean_name_line(first_raw))
        second = _drop_single_letters(clean_name_line(second_raw))
        first_ok = self._plausible_name(first, min_length=2)
        second_ok = self._plausible_name(second, min_length=3)

        if first_ok and second_ok:
            return Success((first, second))
        if second_ok:
            split = _split_full_name(second)
            if split is not None:
                return Success(split)
        return Failure(NameExtractionError())

    @staticmethod
    def _plausible_name(line: str, min_length: int) -> bool:
        return (
            min_length <= len(line) <= _MAX_NAME_LENGTH
            and _LETTERS_ONLY.fullmatch(line) is not None
            and not is_artifact(line)
        )
