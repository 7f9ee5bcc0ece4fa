"""Generic parser for tabular statements (workbooks and delimited text).

Works from a raw matrix plus a header row and column mapping, whether the
mapping came from header detection or from the user.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from ..errors import RowParseSkipped
from ..models import ColumnMapping, ColumnRole, NormalizedTransaction, RawMatrix
from ..settings import DEFAULT_CONFIG, ParserConfig
from ..utils import cell_text, collapse_whitespace, normalize_amount, normalize_date
from ..cleanup import is_summary_row, is_summary_text
from .router import resolve_amount_type, select_strategy

logger = logging.getLogger(__name__)


def parse_row(row: Sequence[str], mapping: ColumnMapping,
              config: ParserConfig = DEFAULT_CONFIG) -> NormalizedTransaction:
    """Turn one data row into a transaction or raise RowParseSkipped."""
    if not row or not any(cell_text(c) for c in row):
        raise RowParseSkipped("empty row")
    if is_summary_row(cell_text(row[0]), config.summary_markers):
        raise RowParseSkipped("summary or separator row")

    date_idx = mapping.get(ColumnRole.DATE)
    raw_date = row[date_idx] if date_idx is not None and date_idx < len(row) else ''
    date = normalize_date(raw_date, (config.date_serial_min, config.date_serial_max))
    if not date:
        raise RowParseSkipped(f"unparseable date {cell_text(raw_date)!r}")

    desc_idx = mapping.get(ColumnRole.DESCRIPTION)
    description = ''
    if desc_idx is not None and desc_idx < len(row):
        description = collapse_whitespace(cell_text(row[desc_idx]))
    if not description:
        raise RowParseSkipped("empty description")
    if is_summary_text(description, config.summary_markers):
        raise RowParseSkipped(f"summary description {description!r}")

    resolution = resolve_amount_type(row, mapping, config)
    if resolution.amount <= 0:
        raise RowParseSkipped("zero amount")

    balance: Optional[float] = None
    bal_idx = mapping.get(ColumnRole.BALANCE)
    if bal_idx is not None and bal_idx < len(row) and cell_text(row[bal_idx]):
        balance = normalize_amount(row[bal_idx])

    return NormalizedTransaction(
        date=date,
        description=description,
        amount=resolution.amount,
        type=resolution.type,
        category='',
        confidence=resolution.confidence,
        balance=balance,
    )


def parse_tabular_rows(matrix: RawMatrix, header_row_index: int, mapping: ColumnMapping,
                       config: ParserConfig = DEFAULT_CONFIG,
                       debug: bool = False) -> Tuple[List[NormalizedTransaction], int]:
    """Parse every row after the header.

    Returns ``(transactions, skipped_rows)``. A bad row is logged and
    skipped; it never aborts the statement.
    """
    transactions: List[NormalizedTransaction] = []
    skipped = 0

    selected = select_strategy(mapping)
    if debug:
        logger.info(f"[GENERIC PARSER] Mapping: {mapping}, strategy: {selected[0] if selected else None}")

    for idx in range(header_row_index + 1, len(matrix)):
        row = matrix[idx]
        try:
            transactions.append(parse_row(row, mapping, config))
        except RowParseSkipped as e:
            skipped += 1
            if debug:
                logger.debug(f"[GENERIC PARSER] Skipping row {idx}: {e.reason}")
            continue

    logger.info(f"[GENERIC PARSER] Parsed {len(transactions)} transactions, skipped {skipped} rows")
    return transactions, skipped
