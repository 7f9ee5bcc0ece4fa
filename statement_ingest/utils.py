import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple

from dateutil import parser as dateparser

DATE_TRIPLET = re.compile(r"^(\d{1,4})[/-](\d{1,2})[/-](\d{1,4})$")
NUMERIC_ONLY = re.compile(r"^\d+(?:\.\d+)?$")
CURRENCY_TOKENS = re.compile(r"(₹|\$|€|£|¥|\brs\.?|\binr\b|\busd\b|\beur\b|\bgbp\b)", re.IGNORECASE)
DR_CR_TOKENS = re.compile(r"(?<![a-z])(dr|cr|debit|credit)(?![a-z])\.?", re.IGNORECASE)
NON_NUMERIC = re.compile(r"[^\d.\-]")
WHITESPACE = re.compile(r"\s+")

# Spreadsheet serial 25569 is 1970-01-01.
EXCEL_EPOCH_OFFSET_DAYS = 25569
MS_PER_DAY = 86400000

_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2004, 2, 2)


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text; missing values become ''."""
    if value is None:
        return ''
    if isinstance(value, float):
        if math.isnan(value):
            return ''
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if text.lower() in {'nan', 'nat', 'none'}:
        return ''
    return text


def collapse_whitespace(text: str) -> str:
    return WHITESPACE.sub(' ', text or '').strip()


def _expand_year(year: int, digits: int) -> int:
    if digits <= 2:
        return 2000 + year if year < 50 else 1900 + year
    return year


def _from_serial(serial: float) -> str:
    ms = (serial - EXCEL_EPOCH_OFFSET_DAYS) * MS_PER_DAY
    return (datetime(1970, 1, 1) + timedelta(milliseconds=ms)).date().isoformat()


def _split_triplet(match: "re.Match") -> Optional[Tuple[int, int, int]]:
    """Return (year, month, day) for a delimited date triplet."""
    first, second, third = match.groups()
    if len(first) == 4:
        return int(first), int(second), int(third)
    if len(third) not in (2, 4):
        return None

    year = _expand_year(int(third), len(third))
    a, b = int(first), int(second)
    if a > 12:
        day, month = a, b
    elif b > 12:
        day, month = b, a
    else:
        # Both could be a month; day-first is assumed.
        day, month = a, b
    if month > 12:
        day, month = month, day
    return year, month, day


def normalize_date(raw_value: Any, serial_range: Tuple[float, float] = (20000, 80000)) -> str:
    """Convert statement date text to ``YYYY-MM-DD``; returns '' if unparseable."""
    s = cell_text(raw_value)
    if not s:
        return ''

    m = DATE_TRIPLET.match(s)
    if m:
        parts = _split_triplet(m)
        if not parts:
            return ''
        try:
            return date(*parts).isoformat()
        except ValueError:
            return ''

    if NUMERIC_ONLY.match(s):
        serial = float(s)
        if serial_range[0] <= serial <= serial_range[1]:
            return _from_serial(serial)
        return ''

    dt = _parse_full_date(s)
    if dt is None or dt.year < 1900:
        return ''
    return dt.date().isoformat()


def _parse_full_date(text: str) -> Optional[datetime]:
    """dateutil parse that rejects dates missing a day, month or year.

    dateutil fills missing parts from ``default``; parsing against two
    defaults that differ in every date part exposes any part that was filled.
    """
    try:
        first = dateparser.parse(text, dayfirst=True, default=_DEFAULT_A)
        second = dateparser.parse(text, dayfirst=True, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first


def _clean_amount_text(raw_value: Any) -> str:
    s = cell_text(raw_value)
    s = CURRENCY_TOKENS.sub('', s)
    s = DR_CR_TOKENS.sub('', s)
    s = s.replace(',', '')
    s = WHITESPACE.sub('', s)
    if s.startswith('(') and s.endswith(')'):
        s = s[1:-1]
    return NON_NUMERIC.sub('', s)


def normalize_amount(raw_value: Any) -> float:
    """Parse currency-like text to a non-negative magnitude; unparseable -> 0.0."""
    cleaned = _clean_amount_text(raw_value)
    if cleaned.endswith('-'):
        cleaned = cleaned[:-1]
    if cleaned in {'', '.', '-', '-.'}:
        return 0.0
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return abs(value)


def amount_is_negative(raw_value: Any) -> bool:
    """True for a leading/trailing minus or accounting parentheses."""
    s = WHITESPACE.sub('', CURRENCY_TOKENS.sub('', cell_text(raw_value)))
    if not s:
        return False
    if s.startswith('(') and s.endswith(')'):
        return True
    stripped = DR_CR_TOKENS.sub('', s)
    return stripped.startswith('-') or stripped.endswith('-')
