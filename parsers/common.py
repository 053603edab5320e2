"""
parsers.common — Amount, date and time grammar shared by both dialects.

Receipts differ mostly in how they label the reference number; amounts,
dates and times are written the same way on bank confirmations and on
official-receipt slips. Every helper here takes whitespace-collapsed text
and is a pure function of it.

Date notations recognised (first hit wins, in this order):

    Sep 21, 2025 / Sep-21-2025 / September 21 2025
    Sep 26 Date and 2025            (noise between day and year)
    2025-09-21 / 2025/09/21
    21/09/2025 / 09.21.2025         (day is whichever component exceeds 12)
    21 Sep 2025

Times are looked for near the date (80 chars before, 160 after), first as
12-hour with an AM/PM marker, then as 24-hour, and finally anywhere in the
text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH_NAME = (
    r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|jul(?:y)?"
    r"|aug(?:ust)?|sep(?:t|tember)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

TIME_WINDOW_BEFORE = 80
TIME_WINDOW_AFTER = 160


# -----------------------------
# Amounts
# -----------------------------

_AMOUNT_LABELED_RE = re.compile(
    r"\b(?:transfer\s+amount|amount|amt|sent)\b[^0-9₱p]{0,20}(?:₱|\bPHP)?\s*(\d[\d,]*(?:\.\d{1,2})?)",
    re.I,
)
_AMOUNT_CURRENCY_RE = re.compile(r"(?:₱\s*|\bPHP\s*)(\d[\d,]*(?:\.\d{1,2})?)", re.I)
_AMOUNT_FALLBACK_RE = re.compile(r"\b(?:\d{1,3}(?:,\d{3})+|\d{4,6})(?:\.\d{1,2})?\b")

MIN_FALLBACK_AMOUNT = 100


def _to_number(raw: str) -> Optional[float]:
    s = raw.replace(",", "")
    try:
        return float(s)
    except ValueError:
        return None


def _largest(values: Iterable[Optional[float]]) -> Optional[float]:
    nums = [v for v in values if v is not None]
    return max(nums) if nums else None


def find_amount(txt: str) -> Optional[float]:
    """Locate the paid amount.

    1. Largest number preceded by an amount label ("Transfer amount",
       "Amount", "Amt", "Sent").
    2. Largest number preceded by a currency marker ("₱", "PHP").
    3. Largest money-looking number (thousands separators or 4-6 bare
       digits) that is at least 100. Long unformatted IDs are skipped.
    """
    labeled = _largest(_to_number(m.group(1)) for m in _AMOUNT_LABELED_RE.finditer(txt))
    if labeled is not None:
        return labeled

    with_currency = _largest(_to_number(m.group(1)) for m in _AMOUNT_CURRENCY_RE.finditer(txt))
    if with_currency is not None:
        return with_currency

    fallback = [_to_number(m.group(0)) for m in _AMOUNT_FALLBACK_RE.finditer(txt)]
    return _largest(v for v in fallback if v is not None and v >= MIN_FALLBACK_AMOUNT)


# -----------------------------
# Dates
# -----------------------------

@dataclass(frozen=True)
class DateSpan:
    ymd: str            # "YYYY-MM-DD"
    start: int
    end: int
    ambiguous: bool = False


_DATE_MONTH_FIRST_RE = re.compile(rf"\b{_MONTH_NAME}[-\s]+(\d{{1,2}})[-\s,]+(20\d{{2}})\b", re.I)
_DATE_MONTH_NOISY_RE = re.compile(rf"\b{_MONTH_NAME}\s+(\d{{1,2}})[^0-9]{{0,20}}(20\d{{2}})\b", re.I)
_DATE_ISO_RE = re.compile(r"\b(20\d{2})[-/](\d{1,2})[-/](\d{1,2})\b")
_DATE_NUMERIC_RE = re.compile(r"\b(\d{1,2})[./-](\d{1,2})[./-](20\d{2})\b")
_DATE_DAY_FIRST_RE = re.compile(rf"\b(\d{{1,2}})\s+{_MONTH_NAME}[a-z]*,?\s*(20\d{{2}})\b", re.I)


def _month_from_name(name: str) -> Optional[int]:
    return MONTHS.get(name[:3].lower())


def _make_span(m: re.Match, year: int, month: Optional[int], day: int,
               ambiguous: bool = False) -> Optional[DateSpan]:
    if not month or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return DateSpan(
        ymd=f"{year:04d}-{month:02d}-{day:02d}",
        start=m.start(),
        end=m.end(),
        ambiguous=ambiguous,
    )


def _numeric_day_month(a: int, b: int) -> tuple[int, int, bool] | None:
    """Resolve ``a/b/YYYY`` into (month, day, ambiguous).

    Whichever component exceeds 12 is the day. When both are <= 12 the
    month-first reading is kept and the result is flagged ambiguous.
    """
    if a > 12 and b > 12:
        return None
    if a > 12:
        return b, a, False
    if b > 12:
        return a, b, False
    return a, b, True


def find_date_span(txt: str) -> Optional[DateSpan]:
    """Return the first recognisable calendar date and where it sits in *txt*."""
    for pattern in (_DATE_MONTH_FIRST_RE, _DATE_MONTH_NOISY_RE):
        m = pattern.search(txt)
        if m:
            span = _make_span(m, int(m.group(3)), _month_from_name(m.group(1)), int(m.group(2)))
            if span:
                return span

    m = _DATE_ISO_RE.search(txt)
    if m:
        span = _make_span(m, int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if span:
            return span

    m = _DATE_NUMERIC_RE.search(txt)
    if m:
        resolved = _numeric_day_month(int(m.group(1)), int(m.group(2)))
        if resolved:
            month, day, ambiguous = resolved
            span = _make_span(m, int(m.group(3)), month, day, ambiguous)
            if span:
                return span

    m = _DATE_DAY_FIRST_RE.search(txt)
    if m:
        span = _make_span(m, int(m.group(3)), _month_from_name(m.group(2)), int(m.group(1)))
        if span:
            return span

    return None


# -----------------------------
# Times
# -----------------------------

_TIME_12H_RE = re.compile(r"\b(\d{1,2}):([0-5]\d)(?::([0-5]\d))?\s*([AaPp]\s*\.?\s*[Mm])\b")
_TIME_24H_RE = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?\b")


def to_24h(hour: int, minute: int, ampm: Optional[str] = None) -> str:
    """Format as ``HH:mm``; 12 AM -> 00, PM hours below 12 get +12."""
    if ampm:
        marker = re.sub(r"[^A-Za-z]", "", ampm).upper()
        if marker == "AM" and hour == 12:
            hour = 0
        elif marker == "PM" and hour < 12:
            hour += 12
    return f"{hour:02d}:{minute:02d}"


def find_time_near(txt: str, index: Optional[int] = None) -> Optional[str]:
    """Find a time of day, preferring the neighbourhood of *index*.

    ``"10:20 AM"``, ``"11:08:47 P.M."``, ``"22:05"`` -> 24-hour ``HH:mm``.
    """
    if index is None:
        segment = txt
    else:
        segment = txt[max(0, index - TIME_WINDOW_BEFORE): min(len(txt), index + TIME_WINDOW_AFTER)]

    m = _TIME_12H_RE.search(segment)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if 1 <= hour <= 12:
            return to_24h(hour, minute, m.group(4))

    m = _TIME_24H_RE.search(segment)
    if m:
        return to_24h(int(m.group(1)), int(m.group(2)))

    if index is not None:
        return find_time_near(txt, None)
    return None


@dataclass(frozen=True)
class DateTimeHit:
    date_time: Optional[str]
    ambiguous: bool = False


def find_date_time(txt: str) -> DateTimeHit:
    """Combine :func:`find_date_span` and :func:`find_time_near`.

    A date-time is only suggested when both halves were found.
    """
    span = find_date_span(txt)
    time = find_time_near(txt, span.end if span else None)
    if span is None or time is None:
        return DateTimeHit(None, False)
    return DateTimeHit(f"{span.ymd}T{time}", span.ambiguous)


# -----------------------------
# References
# -----------------------------

_BARE_NUMBER_REF_RE = re.compile(r"\b\d{6,20}\b")


def first_labeled_ref(txt: str, patterns: List[re.Pattern]) -> Optional[str]:
    """Return the upper-cased group 1 of the first pattern that matches."""
    for pat in patterns:
        m = pat.search(txt)
        if m:
            return re.sub(r"\s+", "", m.group(1)).upper()
    return None


def find_bare_number_ref(txt: str) -> Optional[str]:
    m = _BARE_NUMBER_REF_RE.search(txt)
    return m.group(0) if m else None
