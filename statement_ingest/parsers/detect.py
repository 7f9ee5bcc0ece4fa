"""Header row detection for tabular bank statements.

Scans the first rows of a raw matrix, maps each column role to a column
index by alias matching and picks the row with the best role coverage.
"""
import logging
import re
from typing import List, Mapping, Optional, Sequence, Tuple

from ..models import (ColumnMapping, ColumnRole, DetectionResult, HeaderDetection,
                      HeaderDetectionFailed, RawMatrix)
from ..settings import DEFAULT_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

# Roles are resolved in this order; earlier roles claim a column first.
ROLE_PRIORITY: Tuple[ColumnRole, ...] = (
    ColumnRole.DATE,
    ColumnRole.DESCRIPTION,
    ColumnRole.AMOUNT,
    ColumnRole.DEBIT,
    ColumnRole.CREDIT,
    ColumnRole.BALANCE,
    ColumnRole.TYPE,
)
AMOUNT_BEARING_ROLES = frozenset({ColumnRole.AMOUNT, ColumnRole.DEBIT, ColumnRole.CREDIT})


def _contains_alias(cell: str, alias: str) -> bool:
    """Substring match bounded by non-letters, for compound headers like 'Transaction Date'."""
    if len(cell) <= len(alias):
        return False
    return re.search(r'(?<![a-z])' + re.escape(alias) + r'(?![a-z])', cell) is not None


def map_header_row(row: Sequence[str],
                   aliases: Mapping[ColumnRole, Tuple[str, ...]]) -> ColumnMapping:
    """Map column roles to indices for one candidate header row.

    Exact alias matches are resolved for every role before substring
    matches, and a column is never assigned to two roles.
    """
    cells = [str(c or '').strip().lower() for c in row]
    mapping: ColumnMapping = {}
    claimed = set()

    for role in ROLE_PRIORITY:
        role_aliases = aliases.get(role, ())
        for idx, cell in enumerate(cells):
            if idx not in claimed and cell and cell in role_aliases:
                mapping[role] = idx
                claimed.add(idx)
                break

    for role in ROLE_PRIORITY:
        if role in mapping:
            continue
        for idx, cell in enumerate(cells):
            if idx in claimed or not cell:
                continue
            if any(_contains_alias(cell, alias) for alias in aliases.get(role, ())):
                mapping[role] = idx
                claimed.add(idx)
                break

    return mapping


def is_candidate(mapping: ColumnMapping) -> bool:
    return (ColumnRole.DATE in mapping
            and ColumnRole.DESCRIPTION in mapping
            and any(role in mapping for role in AMOUNT_BEARING_ROLES))


def detect_header(matrix: RawMatrix, config: ParserConfig = DEFAULT_CONFIG,
                  debug: bool = False) -> DetectionResult:
    """Locate the header row and its column mapping.

    Returns a ``HeaderDetection`` for the highest-scoring candidate within
    ``config.header_scan_rows`` rows (ties go to the earliest row), or
    ``HeaderDetectionFailed`` carrying a preview of the raw rows.
    """
    best: Optional[HeaderDetection] = None

    for row_idx, row in enumerate(matrix[:config.header_scan_rows]):
        if not row:
            continue
        mapping = map_header_row(row, config.header_aliases)
        if not is_candidate(mapping):
            continue
        score = len(mapping)
        if debug:
            logger.debug(f"Header candidate at row {row_idx} (score {score}): {mapping}")
        if best is None or score > best.score:
            best = HeaderDetection(header_row_index=row_idx, column_mapping=mapping, score=score)

    if best is None:
        logger.warning(f"No header row found in the first {config.header_scan_rows} rows")
        return HeaderDetectionFailed(preview_rows=preview(matrix, config.preview_rows))

    logger.info(f"Header detected at row {best.header_row_index} with {best.score} roles")
    return best


def preview(matrix: RawMatrix, limit: int) -> List[List[str]]:
    return [list(row) for row in matrix[:limit]]
