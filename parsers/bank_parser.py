"""
BankTransferParser: dialect for bank / e-wallet transfer confirmations
(InstaPay, PESONet, GCash, Maya, online banking screenshots).

Besides amount and date-time, it extracts:
  - the transaction reference, from "Ref No.", "Reference", "Confirmation",
    "Txn ID", "Trace No." labels or a GCash-style spaced reference
    ("Ref No. 0012 345 678901"); a bare 6-20 digit number is the last resort.
  - the bank name, looked up first in the "From ..." segment, then in the
    "To ..." segment, then anywhere in the text.
"""

from __future__ import annotations

import re

from .base_parser import FieldParser, ParsedFields
from .common import find_amount, find_bare_number_ref, find_date_time, first_labeled_ref


# ---------------------------------------------------------------------------
# Bank dictionary
# ---------------------------------------------------------------------------

BANK_PATTERNS: list[tuple[str, list[re.Pattern]]] = [
    ("GCash", [re.compile(r"gcash", re.I)]),
    ("Maya", [re.compile(r"maya", re.I), re.compile(r"pay\s*maya", re.I)]),
    ("BDO", [re.compile(r"\bbdo\b", re.I), re.compile(r"bdo\s+unibank", re.I)]),
    ("BPI", [re.compile(r"\bbpi\b", re.I), re.compile(r"bank of the philippine islands", re.I)]),
    ("Metrobank", [re.compile(r"metrobank", re.I)]),
    ("UnionBank", [re.compile(r"union\s*bank", re.I)]),
    ("RCBC", [re.compile(r"\brcbc\b", re.I)]),
    ("PNB", [re.compile(r"\bpnb\b", re.I), re.compile(r"philippine national bank", re.I)]),
    ("China Bank", [re.compile(r"china\s*bank", re.I)]),
    ("LANDBANK", [re.compile(r"land\s*bank", re.I)]),
    ("Security Bank", [re.compile(r"security\s*bank", re.I)]),
    ("EastWest", [re.compile(r"east\s*west", re.I)]),
    ("CIMB", [re.compile(r"\bcimb\b", re.I), re.compile(r"octo\s+by\s+cimb", re.I)]),
    ("Tonik", [re.compile(r"\btonik\b", re.I)]),
    ("MariBank", [re.compile(r"\bmaribank\b", re.I), re.compile(r"mari\s*bank", re.I)]),
    ("PSBank", [
        re.compile(r"\bpsbank\b", re.I),
        re.compile(r"\bps\s*bank\b", re.I),
        re.compile(r"philippine\s+savings\s+bank", re.I),
    ]),
]

# Words that end a "From ..." / "To ..." segment.
_SEGMENT_BOUNDARIES = [
    re.compile(r"\btransfer\s+to\b", re.I),
    re.compile(r"\bto\b", re.I),
    re.compile(r"\bbeneficiary\b", re.I),
    re.compile(r"\brecipient\b", re.I),
    re.compile(r"\bacct\.?\b", re.I),
    re.compile(r"\baccount\b", re.I),
    re.compile(r"\bref(?:erence)?\b", re.I),
    re.compile(r"\bamount\b", re.I),
    re.compile(r"\bdate\b", re.I),
    re.compile(r"\btime\b", re.I),
    re.compile(r"\bmethod\b", re.I),
    re.compile(r"\bprocessing\b", re.I),
]
_SEGMENT_MAX_CHARS = 320

_FROM_MARKERS = [
    re.compile(r"\b(?:transfer\s+from|from)\b", re.I),
    re.compile(r"\b(?:sender|payer|source\s+account)\b", re.I),
]
_TO_MARKERS = [
    re.compile(r"\b(?:transfer\s+to|to)\b", re.I),
    re.compile(r"\b(?:recipient|beneficiary)\b", re.I),
]

# The captured value may not be the label word itself ("Reference Number 12").
_NOT_LABEL = r"(?!(?:no|number|id|code)\b)"

# Order matters: the spaced GCash form must be tried before the generic label.
_REF_PATTERNS = [
    re.compile(r"\bref\.?\s*no\.?\s*(\d{4}\s\d{3}\s\d{6})\b", re.I),
    re.compile(
        r"\bref(?:erence)?\b[-\s:.#]*(?:no\.?|number|id)?[-\s:.#]*" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{5,})\b",
        re.I,
    ),
    re.compile(
        r"\bconf(?:irmation)?\b\s*(?:no\.?|number|id)?[-\s:.#]+" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{5,})\b",
        re.I,
    ),
    re.compile(
        r"\b(?:txn|trans(?:action)?)\b\s*(?:id|no|code)?[-\s:.#]+" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{5,})\b",
        re.I,
    ),
    re.compile(
        r"\btrace\b\s*(?:no\.?|number|id)?[-\s:.#]+" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{5,})\b",
        re.I,
    ),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def infer_bank_name(segment: str) -> str | None:
    for name, patterns in BANK_PATTERNS:
        if any(p.search(segment) for p in patterns):
            return name
    return None


def slice_after_marker(txt: str, marker: re.Pattern) -> str | None:
    """Text after *marker*, cut at the earliest segment boundary keyword."""
    m = marker.search(txt)
    if not m:
        return None
    rest = txt[m.end(): m.end() + _SEGMENT_MAX_CHARS]
    end = len(rest)
    for boundary in _SEGMENT_BOUNDARIES:
        b = boundary.search(rest)
        if b and b.start() < end:
            end = b.start()
    return rest[:end]


def _segment_bank(txt: str, markers: list[re.Pattern]) -> str | None:
    for marker in markers:
        segment = slice_after_marker(txt, marker)
        if segment:
            return infer_bank_name(segment)
    return None


def find_bank(txt: str) -> str | None:
    return (
        _segment_bank(txt, _FROM_MARKERS)
        or _segment_bank(txt, _TO_MARKERS)
        or infer_bank_name(txt)
    )


def find_bank_ref(txt: str) -> str | None:
    return first_labeled_ref(txt, _REF_PATTERNS) or find_bare_number_ref(txt)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class BankTransferParser(FieldParser):
    dialect = "bank"

    def _parse(self, txt: str) -> ParsedFields:
        dt = find_date_time(txt)
        return ParsedFields(
            raw_text=txt,
            suggested_amount=find_amount(txt),
            suggested_ref=find_bank_ref(txt),
            suggested_date_time=dt.date_time,
            suggested_bank=find_bank(txt),
            date_ambiguous=dt.ambiguous,
        )


def parse_bank_text(text: str | None) -> ParsedFields:
    return BankTransferParser().parse(text)
