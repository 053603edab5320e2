"""Tests for the bank / cash dialect parsers and the shared field grammar."""

import pytest

from parsers import BankTransferParser, CashReceiptParser, parse_bank_text, parse_cash_text
from parsers.common import find_amount, find_date_span, find_time_near, to_24h
from parsers.bank_parser import find_bank


BANK_TEXT = "Amount: PHP 1,250.00 Ref: ABC123456 Date: 2025-03-28 14:30"
CASH_TEXT = "Official Receipt No. 000123456 Total PHP 500.00 March 5, 2025 3:45 PM"


def test_bank_transfer_fields():
    fields = parse_bank_text(BANK_TEXT)
    assert fields.suggested_amount == 1250.0
    assert fields.suggested_ref == "ABC123456"
    assert fields.suggested_date_time == "2025-03-28T14:30"
    assert fields.suggested_bank is None
    assert fields.date_ambiguous is False


def test_cash_receipt_fields():
    fields = parse_cash_text(CASH_TEXT)
    assert fields.suggested_amount == 500.0
    assert fields.suggested_ref == "000123456"
    assert fields.suggested_date_time == "2025-03-05T15:45"
    assert fields.suggested_bank is None


def test_empty_text_yields_nothing():
    for parse in (parse_bank_text, parse_cash_text):
        for text in ("", None, "   \n\t "):
            fields = parse(text)
            assert fields.raw_text == ""
            assert fields.suggested_amount is None
            assert fields.suggested_ref is None
            assert fields.suggested_date_time is None
            assert fields.suggested_bank is None


def test_parsing_ignores_whitespace_layout():
    messy = "Amount:\n  PHP   1,250.00\t\tRef:  ABC123456\nDate: 2025-03-28   14:30"
    assert parse_bank_text(messy).to_dict() == parse_bank_text(BANK_TEXT).to_dict()


def test_parsing_is_idempotent_on_raw_text():
    first = parse_cash_text("  Receipt #  RC-0042\nTotal PHP 80.00 ")
    second = parse_cash_text(first.raw_text)
    assert first == second


def test_parsers_expose_dialect():
    assert BankTransferParser().dialect == "bank"
    assert CashReceiptParser().dialect == "cash"
    assert "bank" in repr(BankTransferParser())


# -------------------- amounts --------------------

def test_labeled_amount_beats_larger_currency_amount():
    assert find_amount("Amount 500.00 Balance PHP 10,000.00") == 500.0


def test_currency_amount_with_peso_sign():
    assert find_amount("Paid ₱ 2,345.75 thank you") == 2345.75


def test_fallback_amount_skips_long_ids():
    assert find_amount("Total 12,345.50 Ref 9876543210") == 12345.5


def test_fallback_amount_ignores_small_numbers():
    assert find_amount("Item 50 qty 2") is None


# -------------------- dates and times --------------------

def test_numeric_date_both_components_small_is_ambiguous():
    fields = parse_bank_text("Paid 03/04/2025 10:20 AM Amount 1,500.00")
    assert fields.suggested_date_time == "2025-03-04T10:20"
    assert fields.date_ambiguous is True


def test_numeric_date_day_over_twelve():
    fields = parse_bank_text("Date 25/03/2025 22:05")
    assert fields.suggested_date_time == "2025-03-25T22:05"
    assert fields.date_ambiguous is False


def test_numeric_date_both_over_twelve_rejected():
    assert find_date_span("13/14/2025") is None
    assert parse_bank_text("13/14/2025 10:00").suggested_date_time is None


def test_out_of_range_month_rejected():
    assert find_date_span("2025-13-01") is None


def test_day_first_month_name():
    assert find_date_span("Paid on 21 Sep 2025").ymd == "2025-09-21"


def test_noisy_month_first_date():
    assert find_date_span("Sep 26 Date and 2025").ymd == "2025-09-26"


def test_dotted_pm_marker():
    fields = parse_bank_text("Sep 21, 2025 11:08:47 P.M.")
    assert fields.suggested_date_time == "2025-09-21T23:08"


def test_spaced_am_marker_at_midnight():
    fields = parse_bank_text("Oct 1 2025 12:15 A . M")
    assert fields.suggested_date_time == "2025-10-01T00:15"


def test_date_without_time_gives_no_date_time():
    assert parse_bank_text("Sep 21, 2025 Amount 500.00").suggested_date_time is None


@pytest.mark.parametrize("hour,minute,ampm,expected", [
    (12, 0, "AM", "00:00"),
    (12, 30, "PM", "12:30"),
    (1, 5, "pm", "13:05"),
    (9, 41, None, "09:41"),
])
def test_to_24h(hour, minute, ampm, expected):
    assert to_24h(hour, minute, ampm) == expected


def test_time_found_anywhere_when_far_from_date():
    txt = "Time 08:15 " + "x" * 200 + " Sep 21, 2025"
    span = find_date_span(txt)
    assert find_time_near(txt, span.end) == "08:15"


# -------------------- references and banks --------------------

def test_gcash_spaced_reference():
    fields = parse_bank_text("GCash Ref No. 0012 345 678901 Amount 150.00")
    assert fields.suggested_ref == "0012345678901"
    assert fields.suggested_bank == "GCash"
    assert fields.suggested_amount == 150.0


def test_bank_reference_labels():
    assert parse_bank_text("Confirmation No: XY98765Z").suggested_ref == "XY98765Z"
    assert parse_bank_text("Txn ID: tx-778899").suggested_ref == "TX-778899"
    assert parse_bank_text("Trace No. 445566").suggested_ref == "445566"


def test_bank_reference_falls_back_to_bare_number():
    assert parse_bank_text("Paid 12345678 OK").suggested_ref == "12345678"


def test_bank_from_segment_wins():
    assert find_bank("Transfer from BPI Savings to GCash Wallet Amount PHP 2,000.00") == "BPI"


def test_bank_to_segment_used_when_sender_unknown():
    assert find_bank("From: Juan Dela Cruz To: UnionBank") == "UnionBank"


def test_bank_anywhere_in_text():
    assert find_bank("Thank you for banking with Metrobank") == "Metrobank"


def test_cash_parser_never_suggests_bank():
    fields = parse_cash_text("Paid via GCash OR# 88812 Amount 300")
    assert fields.suggested_bank is None
    assert fields.suggested_ref == "88812"


def test_word_or_is_not_a_receipt_label():
    fields = parse_cash_text("Paid in cash or card 123456 Total PHP 500.00")
    assert fields.suggested_ref == "123456"
    assert parse_cash_text("Cash or nothing 12345").suggested_ref is None


def test_dotted_or_label():
    assert parse_cash_text("O.R. No. 54321 Total 250").suggested_ref == "54321"


def test_cash_label_word_is_not_a_reference():
    assert parse_cash_text("Receipt Number 12 Total PHP 80.00").suggested_ref is None


def test_bank_label_word_is_not_a_reference():
    assert parse_bank_text("Reference Number 12 Amount 500").suggested_ref is None
    assert parse_bank_text("Confirmation Number 12").suggested_ref is None


def test_bank_reference_after_number_label():
    fields = parse_bank_text("Reference Number: 2025032812345 Amount 500")
    assert fields.suggested_ref == "2025032812345"


def test_to_dict_round_trip_keys():
    d = parse_bank_text(BANK_TEXT).to_dict()
    assert set(d) == {
        "raw_text",
        "suggested_amount",
        "suggested_ref",
        "suggested_date_time",
        "suggested_bank",
        "date_ambiguous",
    }
