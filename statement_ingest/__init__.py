"""Statement ingestion package: turn raw bank statements into normalized transactions.

This package provides:
- parse_source: Read statement bytes (workbook, delimited text or PDF) and parse them
- parse_matrix / parse_with_mapping: Tabular parsing with detected or manual headers
- parse_document: Line-based parsing of positioned document text
- models: Result and transaction types
- exporters: JSON and Excel export functions
- parsers: Header detection, amount resolution and balance inference
"""

__all__ = [
    "parse_source",
    "parse_matrix",
    "parse_with_mapping",
    "parse_document",
    "parse_document_text",
    "ColumnRole",
    "TransactionType",
    "NormalizedTransaction",
    "ParseSuccess",
    "HeaderDetectionFailed",
    "NoTransactionsParsed",
    "ParserConfig",
    "exporters",
    "parsers",
]

from .extractor import parse_document, parse_document_text, parse_matrix, parse_source, parse_with_mapping
from .models import (ColumnRole, HeaderDetectionFailed, NormalizedTransaction, NoTransactionsParsed,
                     ParseSuccess, TransactionType)
from .settings import ParserConfig
