"""Tests for suggestion scoring, winner selection and the review gates."""

import pytest

from parsers import ParsedFields
from pipeline.suggest import (
    needs_manual_review,
    pick_winner,
    score_suggestion,
    should_fallback,
    suggest_from_recognition,
    suggest_from_text,
)
from recognition.engine import RecognitionResult


BANK_TEXT = "Amount: PHP 1,250.00 Ref: ABC123456 Date: 2025-03-28 14:30"
CASH_TEXT = "Official Receipt No. 000123456 Total PHP 500.00 March 5, 2025 3:45 PM"


def test_score_weights():
    full = ParsedFields("t", 100.0, "R1", "2025-01-01T00:00", "BPI")
    assert score_suggestion(full) == 8
    assert score_suggestion(ParsedFields("t", suggested_amount=0.0)) == 3
    assert score_suggestion(ParsedFields("t", suggested_bank="BPI")) == 1
    assert score_suggestion(ParsedFields("")) == 0


def test_tie_goes_to_first_dialect():
    parses = {
        "bank": ParsedFields("t", suggested_amount=1.0),
        "cash": ParsedFields("t", suggested_ref="X"),
    }
    assert pick_winner(parses) == "bank"


def test_higher_score_wins():
    parses = {
        "bank": ParsedFields("t", suggested_bank="BPI"),
        "cash": ParsedFields("t", suggested_ref="X"),
    }
    assert pick_winner(parses) == "cash"


def test_pick_winner_requires_parses():
    with pytest.raises(ValueError):
        pick_winner({})


@pytest.mark.parametrize("confidence,expected", [
    (59.9, True),
    (60.0, False),
    (95.0, False),
    (0.0, True),
    (None, False),
])
def test_should_fallback_threshold(confidence, expected):
    assert should_fallback(confidence) is expected


def test_bank_name_alone_needs_manual_review():
    s = suggest_from_text("GCash")
    assert s.winner.suggested_bank == "GCash"
    assert s.should_manual is True


def test_low_quality_text_needs_manual_review():
    parses = {"bank": ParsedFields("x", suggested_ref="ABC123")}
    assert needs_manual_review("ref ABC123", parses) is True


def test_bank_receipt_suggestion():
    s = suggest_from_text(BANK_TEXT)
    assert s.winner_dialect == "bank"
    assert s.winner.suggested_amount == 1250.0
    assert s.should_manual is False
    assert s.should_fallback is False
    assert s.source == "local"
    assert s.confidence == 100.0


def test_cash_receipt_tie_reports_both_parses():
    s = suggest_from_text(CASH_TEXT)
    # both dialects find amount, ref and date-time; the bank dialect wins ties
    assert s.winner_dialect == "bank"
    assert s.cash.suggested_ref == "000123456"
    assert s.cash.suggested_bank is None
    assert s.bank.suggested_ref == "000123456"
    assert s.should_manual is False


def test_empty_text_suggestion():
    s = suggest_from_text("", 0.0)
    assert s.raw_text == ""
    assert s.winner.suggested_amount is None
    assert s.should_manual is True
    assert s.should_fallback is True


def test_low_confidence_flags_fallback():
    assert suggest_from_text(BANK_TEXT, 40.0).should_fallback is True


def test_to_dict_shape():
    d = suggest_from_text(BANK_TEXT).to_dict()
    assert d["winner"] == "bank"
    assert d["suggested"]["suggested_ref"] == "ABC123456"
    assert set(d["parses"]) == {"bank", "cash"}
    assert "fallback_error" not in d
    assert "variant" not in d


def test_suggest_from_recognition_keeps_variant():
    s = suggest_from_recognition(RecognitionResult(BANK_TEXT, 72.5, "rot90-psm6"))
    assert s.variant == "rot90-psm6"
    assert s.confidence == 72.5
    assert s.to_dict()["variant"] == "rot90-psm6"
