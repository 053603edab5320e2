"""
Suggestion building: runs every dialect parser over one text blob, scores
the parses, picks the winner and decides whether manual entry should be
recommended.

Scoring
-------
  score_suggestion = 3*amount + 3*ref + 1*date_time + 1*bank   (non-null fields)

The first parser in the sequence (the bank dialect by default) wins ties.

Manual review is recommended when the manual-gate text score is below the
floor (30) OR no parser found any of amount / ref / date-time. A bank name
on its own is not enough.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from parsers import FieldParser, ParsedFields, default_parsers
from recognition.engine import RecognitionResult, collapse_whitespace
from recognition.quality import score_manual_gate

CONFIDENCE_THRESHOLD = 60.0
MANUAL_SCORE_FLOOR = 30.0

SOURCE_LOCAL = "local"
SOURCE_REMOTE = "remote"


@dataclass
class ReceiptSuggestion:
    """Field suggestions for one receipt image (or text blob)."""

    raw_text: str
    confidence: Optional[float]
    parses: Dict[str, ParsedFields]         # dialect -> parse, in evaluation order
    winner_dialect: str
    should_manual: bool
    should_fallback: bool
    source: str = SOURCE_LOCAL              # "local" | "remote"
    fallback_error: Optional[str] = None
    word_count: Optional[int] = None
    variant: Optional[str] = None

    @property
    def winner(self) -> ParsedFields:
        return self.parses[self.winner_dialect]

    @property
    def bank(self) -> Optional[ParsedFields]:
        return self.parses.get("bank")

    @property
    def cash(self) -> Optional[ParsedFields]:
        return self.parses.get("cash")

    def to_dict(self) -> dict:
        out = {
            "raw_text": self.raw_text,
            "confidence": self.confidence,
            "source": self.source,
            "winner": self.winner_dialect,
            "should_manual": self.should_manual,
            "should_fallback": self.should_fallback,
            "suggested": self.winner.to_dict(),
            "parses": {k: v.to_dict() for k, v in self.parses.items()},
        }
        if self.fallback_error is not None:
            out["fallback_error"] = self.fallback_error
        if self.word_count is not None:
            out["word_count"] = self.word_count
        if self.variant is not None:
            out["variant"] = self.variant
        return out


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def score_suggestion(fields: ParsedFields) -> int:
    return (
        (3 if fields.suggested_amount is not None else 0)
        + (3 if fields.suggested_ref is not None else 0)
        + (1 if fields.suggested_date_time is not None else 0)
        + (1 if fields.suggested_bank is not None else 0)
    )


def pick_winner(parses: Dict[str, ParsedFields]) -> str:
    """Dialect with the highest score; earlier dialects win ties."""
    if not parses:
        raise ValueError("No parses provided to pick_winner.")
    best_dialect, best_score = None, -1
    for dialect, fields in parses.items():
        score = score_suggestion(fields)
        if score > best_score:
            best_dialect, best_score = dialect, score
    return best_dialect


def needs_manual_review(
    raw_text: str,
    parses: Dict[str, ParsedFields],
    floor: float = MANUAL_SCORE_FLOOR,
) -> bool:
    has_any = any(p.has_any_core_field() for p in parses.values())
    return score_manual_gate(raw_text) < floor or not has_any


def should_fallback(confidence: Optional[float], threshold: float = CONFIDENCE_THRESHOLD) -> bool:
    """True iff a reported confidence is strictly below *threshold*."""
    if confidence is None:
        return False
    return confidence < threshold


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def suggest_from_text(
    text: str | None,
    confidence: Optional[float] = 100.0,
    *,
    parsers: Optional[Sequence[FieldParser]] = None,
    threshold: float = CONFIDENCE_THRESHOLD,
    manual_floor: float = MANUAL_SCORE_FLOOR,
    source: str = SOURCE_LOCAL,
) -> ReceiptSuggestion:
    """Parse already-extracted text with every dialect and pick the winner."""
    raw = collapse_whitespace(text)
    dialects = parsers if parsers is not None else default_parsers()
    parses = {p.dialect: p.parse(raw) for p in dialects}

    return ReceiptSuggestion(
        raw_text=raw,
        confidence=confidence,
        parses=parses,
        winner_dialect=pick_winner(parses),
        should_manual=needs_manual_review(raw, parses, manual_floor),
        should_fallback=should_fallback(confidence, threshold),
        source=source,
    )


def suggest_from_recognition(
    result: RecognitionResult,
    *,
    parsers: Optional[Sequence[FieldParser]] = None,
    threshold: float = CONFIDENCE_THRESHOLD,
    manual_floor: float = MANUAL_SCORE_FLOOR,
) -> ReceiptSuggestion:
    suggestion = suggest_from_text(
        result.text,
        result.confidence,
        parsers=parsers,
        threshold=threshold,
        manual_floor=manual_floor,
    )
    suggestion.variant = result.variant
    return suggestion
