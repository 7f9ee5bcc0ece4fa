"""Text-based parsing of document (PDF) statements.

Positioned text fragments are rebuilt into reading-order lines, then each
line is matched against the supported transaction layouts:

- standard: ``date description amount Dr|Cr balance``
- columnar: ``date description value-date amount balance``

Lines that match neither are treated as continuations of the previous
transaction's description.
"""
import logging
import re
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import StatementSummary, TextFragment, TransactionType
from ..utils import collapse_whitespace, normalize_amount, normalize_date
from .balance import PendingTransaction

logger = logging.getLogger(__name__)

DATE_TOKEN = r'\d{2}/\d{2}/\d{2,4}'

TRANSACTION_LINE_STANDARD = re.compile(
    rf'({DATE_TOKEN})\s+(.+?)\s+([0-9,]+\.?\d*)\s+(Dr|Cr|DR|CR)\s+([0-9,]+\.?\d*)')
TRANSACTION_LINE_COLUMNAR = re.compile(
    rf'^({DATE_TOKEN})\s+(.+?)\s+({DATE_TOKEN})\s+([0-9,]+\.\d{{2}})\s+([0-9,]+\.\d{{2}})')
STARTS_WITH_DATE = re.compile(rf'^{DATE_TOKEN}')
BALANCE_MARKER = re.compile(r'^(opening|closing)\s+balance', re.IGNORECASE)
SUMMARY_MARKER = re.compile(r'^(total|statement\s+summary|page\s+\d+)', re.IGNORECASE)
HEADER_LINE = re.compile(r'\bdate\b.*\b(narration|description|particulars|details)\b', re.IGNORECASE)
DESCRIPTION_MAX_LENGTH = 200

ACCOUNT_NUMBER = re.compile(r'Account\s+No[:.\s]+(\d{9,18})', re.IGNORECASE)
ACCOUNT_HOLDER = re.compile(r'Account\s+Holder[:\s]+([A-Z][A-Z .]+)', re.IGNORECASE)
STATEMENT_PERIOD = re.compile(
    rf'Statement\s+(?:Period|From)[:\s]+({DATE_TOKEN})\s+to\s+({DATE_TOKEN})', re.IGNORECASE)
OPENING_BALANCE = re.compile(r'Opening\s+Balance[: \t]+(?:Rs\.?\s*|INR\s*)?([0-9,]+\.?\d*)', re.IGNORECASE)
CLOSING_BALANCE = re.compile(r'Closing\s+Balance[: \t]+(?:Rs\.?\s*|INR\s*)?([0-9,]+\.?\d*)', re.IGNORECASE)
# Summary table row: opening balance, debit count, credit count, debits, credits, closing balance.
SUMMARY_TABLE = re.compile(
    r'([0-9,]+\.\d{2})\s+\d+\s+\d+\s+[0-9,]+\.\d{2}\s+[0-9,]+\.\d{2}\s+([0-9,]+\.\d{2})')
BANK_NAME = re.compile(r'\b([A-Z][A-Za-z]+(?:\s+[A-Z][A-Za-z]+)*\s+Bank)\b')


# --- Reading-order reconstruction ---

def _fold_fragment(lines: List[List[TextFragment]], fragment: TextFragment,
                   tolerance: float) -> List[List[TextFragment]]:
    if lines and abs(lines[-1][-1].y - fragment.y) <= tolerance:
        lines[-1].append(fragment)
    else:
        lines.append([fragment])
    return lines


def group_page_lines(fragments: Iterable[TextFragment], tolerance: float = 5.0) -> List[str]:
    """Rebuild the lines of one page, top to bottom and left to right."""
    visible = [f for f in fragments if f.text and f.text.strip()]
    ordered = sorted(visible, key=lambda f: -f.y)
    grouped = reduce(lambda acc, frag: _fold_fragment(acc, frag, tolerance), ordered, [])
    return [
        ' '.join(f.text.strip() for f in sorted(line, key=lambda f: f.x))
        for line in grouped
    ]


def reconstruct_text(pages: Sequence[Sequence[TextFragment]], tolerance: float = 5.0) -> str:
    """Concatenate the reconstructed lines of every page in document order."""
    page_texts = ['\n'.join(group_page_lines(page, tolerance)) for page in pages]
    return '\n'.join(text for text in page_texts if text)


# --- Line classification ---

def _to_float(raw: str) -> float:
    return normalize_amount(raw)


def match_transaction_line(line: str) -> Optional[PendingTransaction]:
    """Parse a single line in either supported layout; None if it is not a transaction."""
    m = TRANSACTION_LINE_STANDARD.search(line)
    if m:
        date_raw, description, amount, marker, balance = m.groups()
        return PendingTransaction(
            date=normalize_date(date_raw),
            description=collapse_whitespace(description),
            amount=_to_float(amount),
            balance=_to_float(balance),
            type=TransactionType.INCOME if marker.lower() == 'cr' else TransactionType.EXPENSE,
            confidence=0.9,
        )

    m = TRANSACTION_LINE_COLUMNAR.search(line)
    if m:
        date_raw, description, _value_date, amount, balance = m.groups()
        return PendingTransaction(
            date=normalize_date(date_raw),
            description=collapse_whitespace(description),
            amount=_to_float(amount),
            balance=_to_float(balance),
            type=None,
            confidence=0.8,
        )
    return None


def is_description_continuation(line: str) -> bool:
    return (not STARTS_WITH_DATE.match(line)
            and not BALANCE_MARKER.match(line)
            and not SUMMARY_MARKER.match(line)
            and not HEADER_LINE.search(line)
            and len(line) > 5)


def extract_document_transactions(text: str, debug: bool = False) -> Tuple[List[PendingTransaction], int]:
    """Collect transaction lines and attach continuation lines.

    Returns ``(pending, skipped_lines)`` where ``skipped_lines`` counts
    date-led lines that matched no layout or carried an invalid date.
    """
    pending: List[PendingTransaction] = []
    skipped = 0

    for line_no, raw_line in enumerate(text.split('\n')):
        line = raw_line.strip()
        if not line:
            continue

        trans = match_transaction_line(line)
        if trans is not None:
            if not trans.date:
                skipped += 1
                logger.debug(f"Line {line_no}: invalid date, skipped: {line!r}")
                continue
            pending.append(trans)
            continue

        if STARTS_WITH_DATE.match(line):
            skipped += 1
            if debug:
                logger.debug(f"Line {line_no}: date found but no transaction match: {line!r}")
            continue

        if pending and is_description_continuation(line):
            pending[-1].description = f"{pending[-1].description} {line}"

    for trans in pending:
        trans.description = trans.description[:DESCRIPTION_MAX_LENGTH].rstrip()

    logger.info(f"Document text yielded {len(pending)} transaction lines ({skipped} unmatched)")
    return pending, skipped


# --- Statement metadata ---

def _first_group(pattern: "re.Pattern", text: str) -> Optional[str]:
    m = pattern.search(text)
    return m.group(1).strip() if m else None


def extract_statement_summary(text: str) -> StatementSummary:
    """Account details and opening/closing balances from the statement text."""
    summary = StatementSummary(
        account_number=_first_group(ACCOUNT_NUMBER, text),
        account_holder=_first_group(ACCOUNT_HOLDER, text),
        bank_name=_first_group(BANK_NAME, text),
    )

    period = STATEMENT_PERIOD.search(text)
    if period:
        summary.period_from = normalize_date(period.group(1)) or None
        summary.period_to = normalize_date(period.group(2)) or None

    opening = _first_group(OPENING_BALANCE, text)
    closing = _first_group(CLOSING_BALANCE, text)
    summary.opening_balance = normalize_amount(opening) if opening else None
    summary.closing_balance = normalize_amount(closing) if closing else None

    if not summary.opening_balance:
        table = SUMMARY_TABLE.search(text)
        if table:
            logger.debug(f"Opening balance taken from summary table: {table.group(0)}")
            summary.opening_balance = normalize_amount(table.group(1))
            if summary.closing_balance is None:
                summary.closing_balance = normalize_amount(table.group(2))

    return summary
