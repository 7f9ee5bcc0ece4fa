"""High-level entry points for statement ingestion.

Every function here is pure with respect to its inputs: configuration is
passed explicitly and no state survives between calls.
"""
import logging
from typing import List, Optional, Sequence

from . import readers
from .cleanup import cleanup_transactions
from .errors import UnsupportedSourceFormat
from .models import (ColumnMapping, HeaderDetectionFailed, NormalizedTransaction,
                     NoTransactionsParsed, ParseResult, ParseSuccess, RawMatrix, TextFragment)
from .parsers.balance import apply_balance_inference
from .parsers.detect import detect_header
from .parsers.document import (extract_document_transactions, extract_statement_summary,
                               reconstruct_text)
from .parsers.generic import parse_tabular_rows
from .settings import DEFAULT_CONFIG, ParserConfig

logger = logging.getLogger(__name__)


def parse_with_mapping(matrix: RawMatrix, header_row_index: int, column_mapping: ColumnMapping,
                       config: ParserConfig = DEFAULT_CONFIG, debug: bool = False) -> ParseResult:
    """Parse a tabular statement using a known header row and column mapping.

    This is the manual-mapping entry point; ``parse_matrix`` calls it after
    header detection.
    """
    if header_row_index < 0 or header_row_index >= len(matrix):
        raise ValueError(f"Header row {header_row_index} is outside the statement ({len(matrix)} rows)")

    transactions, skipped = parse_tabular_rows(matrix, header_row_index, column_mapping, config, debug)
    transactions = cleanup_transactions(transactions, config.summary_markers, debug)

    if not transactions:
        logger.warning(f"No transactions parsed ({skipped} rows skipped)")
        return NoTransactionsParsed(header_row_index=header_row_index,
                                    column_mapping=dict(column_mapping),
                                    skipped_rows=skipped)
    return ParseSuccess(transactions=transactions,
                        header_row_index=header_row_index,
                        column_mapping=dict(column_mapping),
                        skipped_rows=skipped)


def parse_matrix(matrix: RawMatrix, config: ParserConfig = DEFAULT_CONFIG,
                 debug: bool = False) -> ParseResult:
    """Detect the header of a tabular statement and parse its rows."""
    detection = detect_header(matrix, config, debug)
    if isinstance(detection, HeaderDetectionFailed):
        return detection
    return parse_with_mapping(matrix, detection.header_row_index, detection.column_mapping,
                              config, debug)


def parse_document_text(text: str, config: ParserConfig = DEFAULT_CONFIG,
                        debug: bool = False) -> ParseResult:
    """Parse reconstructed document text."""
    summary = extract_statement_summary(text)
    pending, skipped = extract_document_transactions(text, debug)
    resolved = apply_balance_inference(pending, summary.opening_balance,
                                       config.balance_tolerance, debug)

    transactions: List[NormalizedTransaction] = [
        NormalizedTransaction(
            date=p.date,
            description=p.description,
            amount=p.amount,
            type=p.type,
            category='',
            confidence=p.confidence,
            balance=p.balance,
        )
        for p in resolved
    ]
    transactions = cleanup_transactions(transactions, config.summary_markers, debug)

    if not transactions:
        return NoTransactionsParsed(skipped_rows=skipped)
    return ParseSuccess(transactions=transactions, skipped_rows=skipped, summary=summary)


def parse_document(pages: Sequence[Sequence[TextFragment]], config: ParserConfig = DEFAULT_CONFIG,
                   debug: bool = False) -> ParseResult:
    """Parse a document statement from positioned text fragments per page."""
    text = reconstruct_text(pages, config.line_tolerance)
    if debug:
        logger.debug(f"Reconstructed text preview: {text[:500]!r}")
    return parse_document_text(text, config, debug)


def read_matrix(data: bytes, filename: Optional[str] = None) -> RawMatrix:
    """Raw matrix of a tabular source; raises UnsupportedSourceFormat for documents."""
    source_format = readers.detect_source_format(data, filename)
    if source_format == readers.WORKBOOK:
        return readers.read_workbook(data)
    if source_format == readers.DELIMITED:
        return readers.read_delimited(data)
    raise UnsupportedSourceFormat("Document statements have no tabular matrix")


def parse_source(data: bytes, filename: Optional[str] = None, password: Optional[str] = None,
                 config: ParserConfig = DEFAULT_CONFIG, debug: bool = False) -> ParseResult:
    """Read statement bytes of any supported kind and parse them.

    Raises UnsupportedSourceFormat, PasswordRequired or IncorrectPassword
    for input-boundary problems; parse outcomes come back as result objects.
    """
    source_format = readers.detect_source_format(data, filename)
    logger.info(f"Parsing {filename or 'statement'} as {source_format}")

    if source_format == readers.DOCUMENT:
        pages = readers.read_document(data, password=password)
        return parse_document(pages, config, debug)
    if source_format == readers.WORKBOOK:
        return parse_matrix(readers.read_workbook(data), config, debug)
    return parse_matrix(readers.read_delimited(data), config, debug)
