"""
recognition.quality — Cheap "does this look like a receipt?" heuristics.

Two scorers share the same signals (digits, currency markers, receipt
keywords) but are tuned against different decision points and must not be
mixed up:

* :func:`score_variant_text` ranks the text produced by competing
  recognition variants. It adds a length term and a digit-density bonus.
* :func:`score_manual_gate` is compared against the manual-review floor
  (30 by default) when deciding whether to recommend manual entry.
"""

from __future__ import annotations

import re

from .engine import collapse_whitespace

_DIGIT_RE = re.compile(r"\d")
_MONEY_RE = re.compile(r"(?:₱|\bPHP\b)", re.I)

_VARIANT_KEYWORDS_RE = re.compile(
    r"\b(amount|php|reference|ref|txn|transaction|date|time|instapay|transfer"
    r"|account|acct|official\s+receipt|invoice)\b",
    re.I,
)
_GATE_KEYWORDS_RE = re.compile(
    r"\b(amount|total|ref|reference|txn|transaction|official\s+receipt|invoice"
    r"|date|time)\b",
    re.I,
)


def score_variant_text(text: str) -> float:
    """Score a recognised text blob for variant selection.

    ``0.1*L + 1.5*digits + 8*money + 5*keywords + 40*digits/max(10, L)``
    over the whitespace-collapsed text. Empty text scores ``-inf`` so it
    loses to any non-empty candidate.
    """
    t = collapse_whitespace(text)
    if not t:
        return float("-inf")
    length = len(t)
    digits = len(_DIGIT_RE.findall(t))
    money = len(_MONEY_RE.findall(t))
    keywords = len(_VARIANT_KEYWORDS_RE.findall(t))
    density = digits / max(10, length)
    return length * 0.1 + digits * 1.5 + money * 8 + keywords * 5 + density * 40


def score_manual_gate(text: str) -> float:
    """Trust score for the manual-review gate: ``digits + 5*money + 4*keywords``."""
    t = collapse_whitespace(text)
    if not t:
        return 0.0
    digits = len(_DIGIT_RE.findall(t))
    money = len(_MONEY_RE.findall(t))
    keywords = len(_GATE_KEYWORDS_RE.findall(t))
    return float(digits + money * 5 + keywords * 4)
