"""Declarative regex rules with explicit success/failure outcomes.

A field is described by an ordered list of :class:`Rule` objects. The
first rule whose pattern matches decides the outcome: its normalized
capture is validated into a :class:`Success` or a :class:`Failure`, and
later rules are never consulted, even on failure.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from cedula_ocr.exceptions import IdExtractionError

T = TypeVar("T")
C = TypeVar("C")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successfully extracted and validated value."""

    value: T


@dataclass(frozen=True)
class Failure:
    """An extraction that matched but failed validation."""

    error: IdExtractionError

    @property
    def message(self) -> str:
        return str(self.error)


Outcome = Success[T] | Failure


@dataclass(frozen=True)
class Rule(Generic[C, T]):
    """A pattern with the steps that turn its match into a value.

    Attributes:
        name: Identifier used in log messages.
        pattern: Compiled regex searched anywhere in the text.
        normalize: Converts the match into an intermediate capture.
        validate: Turns the capture into a success or a failure.
    """

    name: str
    pattern: re.Pattern[str]
    normalize: Callable[[re.Match[str]], C]
    validate: Callable[[C], Outcome[T]]

    def apply(self, text: str) -> Outcome[T] | None:
        """Evaluate the rule, returning ``None`` when the pattern is absent."""
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.validate(self.normalize(match))


def accept(value: T) -> Success[T]:
    """Validator that accepts any normalized value."""
    return Success(value)


def first_match(
    rules: Iterable[Rule[C, T]],
    text: str,
    logger: logging.Logger | None = None,
) -> Outcome[T] | None:
    """Return the outcome of the first rule whose pattern matches.

    Args:
        rules: Rules in priority order.
        text: Text to search.
        logger: Optional logger receiving a debug trace of the decision.

    Returns:
        The deciding rule's outcome, or ``None`` if no pattern matched.
    """
    for rule in rules:
        outcome = rule.apply(text)
        if outcome is None:
            continue
        if logger is not None:
            logger.debug("Rule %s matched: %s", rule.name, outcome)
        return outcome
    return None
