"""
FieldParser: Abstract base class for receipt dialect parsers.
Defines the contract every dialect must fulfil and the shared output record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass

from recognition.engine import collapse_whitespace


# ---------------------------------------------------------------------------
# Data model for a single dialect's output
# ---------------------------------------------------------------------------

@dataclass
class ParsedFields:
    """Field suggestions extracted from one text blob by one dialect."""

    raw_text: str
    suggested_amount: float | None = None
    suggested_ref: str | None = None
    suggested_date_time: str | None = None     # "YYYY-MM-DDTHH:mm", 24-hour
    suggested_bank: str | None = None          # bank dialect only

    # True when the date came from a numeric a/b/YYYY form where both a and b <= 12
    date_ambiguous: bool = False

    def has_any_core_field(self) -> bool:
        return (
            self.suggested_amount is not None
            or self.suggested_ref is not None
            or self.suggested_date_time is not None
        )

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Abstract base class
# ---------------------------------------------------------------------------

class FieldParser(ABC):
    """
    Abstract dialect parser. Subclasses implement `_parse` over text that has
    already been whitespace-collapsed; the base class does the collapsing so
    every dialect sees identical input. Parsers are pure: no I/O, no state.
    """

    dialect: str = ""

    def parse(self, text: str | None) -> ParsedFields:
        return self._parse(collapse_whitespace(text))

    @abstractmethod
    def _parse(self, txt: str) -> ParsedFields:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect!r})"
