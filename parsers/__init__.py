from __future__ import annotations

from .bank_parser import BankTransferParser, parse_bank_text
from .base_parser import FieldParser, ParsedFields
from .cash_parser import CashReceiptParser, parse_cash_text


def default_parsers() -> list[FieldParser]:
    """Dialects in tie-break order: the first one wins equal scores."""
    return [BankTransferParser(), CashReceiptParser()]


__all__ = [
    "FieldParser",
    "ParsedFields",
    "BankTransferParser",
    "CashReceiptParser",
    "parse_bank_text",
    "parse_cash_text",
    "default_parsers",
]
