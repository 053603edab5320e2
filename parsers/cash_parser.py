"""
CashReceiptParser: dialect for cash payments evidenced by an official
receipt (O.R.) or a cashier's slip.

Reference labels differ from bank confirmations: "Official Receipt No.",
"O.R. No.", "Receipt #", "OR#". A bare 6-20 digit number is the last
resort. Cash receipts have no bank, so `suggested_bank` is always None.
"""

from __future__ import annotations

import re

from .base_parser import FieldParser, ParsedFields
from .common import find_amount, find_bare_number_ref, find_date_time, first_labeled_ref

# "O.R." needs its dots and a bare "OR" needs "#" or "No." so the word "or" is
# never read as a label. The captured value may not be the label word itself.
_NOT_LABEL = r"(?!(?:no|number)\b)"

_REF_PATTERNS = [
    re.compile(
        r"\b(?:official\s+receipt|o\.\s*r\.?)\s*(?:no\.?|number)?[-\s:.#]*" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{4,})\b",
        re.I,
    ),
    re.compile(
        r"\breceipt\s*(?:no\.?|number|#)?[-\s:.#]*" + _NOT_LABEL + r"([A-Z0-9][A-Z0-9-]{4,})\b",
        re.I,
    ),
    re.compile(r"\bOR\s*(?:#|no\b\.?)[-\s:.#]*" + _NOT_LABEL + r"([A-Z0-9-]{4,})\b", re.I),
]


def find_cash_ref(txt: str) -> str | None:
    return first_labeled_ref(txt, _REF_PATTERNS) or find_bare_number_ref(txt)


class CashReceiptParser(FieldParser):
    dialect = "cash"

    def _parse(self, txt: str) -> ParsedFields:
        dt = find_date_time(txt)
        return ParsedFields(
            raw_text=txt,
            suggested_amount=find_amount(txt),
            suggested_ref=find_cash_ref(txt),
            suggested_date_time=dt.date_time,
            suggested_bank=None,
            date_ambiguous=dt.ambiguous,
        )


def parse_cash_text(text: str | None) -> ParsedFields:
    return CashReceiptParser().parse(text)
