"""Exceptions raised while reading and parsing statements.

Statement-level outcomes (header detection failing, nothing parsed) are
returned as result objects from ``statement_ingest.models``; the classes here
cover row-level skips and problems at the input boundary.
"""


class StatementIngestError(Exception):
    """Base class for ingestion errors."""


class RowParseSkipped(StatementIngestError):
    """A single row could not be resolved and is dropped."""

    def __init__(self, reason: str, row_index: int = -1):
        super().__init__(reason)
        self.reason = reason
        self.row_index = row_index


class UnsupportedSourceFormat(StatementIngestError):
    """The input is not a workbook, delimited text or PDF document."""


class PasswordRequired(StatementIngestError):
    """The document is encrypted and no password was supplied."""


class IncorrectPassword(StatementIngestError):
    """The supplied password did not decrypt the document."""
