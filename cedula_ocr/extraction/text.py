"""Small text helpers shared by the card-side parsers."""

import re
import unicodedata

# Uppercase letters that appear in Dominican names and places.
LETTERS = "A-ZÁÉÍÓÚÑÜ"

_LETTER = re.compile(f"[{LETTERS}]")
_WHITESPACE = re.compile(r"\s+")


def split_lines(text: str) -> list[str]:
    """Uppercase OCR text and return its stripped, non-empty lines."""
    return [line.strip() for line in text.upper().split("\n") if line.strip()]


def count_letters(text: str) -> int:
    return len(_LETTER.findall(text))


def has_letter(text: str) -> bool:
    return _LETTER.search(text) is not None


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def fold_accents(text: str) -> str:
    """Remove diacritics, e.g. ``"SAMANÁ"`` -> ``"SAMANA"``."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def letter_density_too_low(text: str, minimum: float = 0.3) -> bool:
    """Whether fewer than ``minimum`` of the characters are letters."""
    return count_letters(text) < len(text) * minimum
