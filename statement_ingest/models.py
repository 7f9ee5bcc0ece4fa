"""Data model shared by every stage of the ingestion pipeline."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

RawMatrix = Tuple[Tuple[str, ...], ...]


class ColumnRole(Enum):
    DATE = "date"
    DESCRIPTION = "description"
    AMOUNT = "amount"
    DEBIT = "debit"
    CREDIT = "credit"
    BALANCE = "balance"
    TYPE = "type"


ColumnMapping = Dict[ColumnRole, int]


class TransactionType(Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TextFragment(NamedTuple):
    """A piece of text extracted from a document page.

    Coordinates follow PDF conventions: origin at the bottom-left,
    larger ``y`` means higher on the page.
    """
    text: str
    x: float
    y: float
    height: float = 0.0


@dataclass(frozen=True)
class Resolution:
    """Amount and direction resolved for one row."""
    amount: float
    type: TransactionType
    confidence: float


@dataclass
class NormalizedTransaction:
    date: str
    description: str
    amount: float
    type: TransactionType
    category: str = ""
    confidence: float = 0.0
    balance: Optional[float] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data['type'] = self.type.value
        return data


@dataclass
class StatementSummary:
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    period_from: Optional[str] = None
    period_to: Optional[str] = None
    opening_balance: Optional[float] = None
    closing_balance: Optional[float] = None
    bank_name: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class HeaderDetection:
    header_row_index: int
    column_mapping: ColumnMapping
    score: int


# --- Statement-level results ---

@dataclass
class ParseSuccess:
    transactions: List[NormalizedTransaction]
    header_row_index: Optional[int] = None
    column_mapping: Optional[ColumnMapping] = None
    skipped_rows: int = 0
    summary: Optional[StatementSummary] = None
    ok = True


@dataclass
class HeaderDetectionFailed:
    """No row in the scanned window qualified as a header.

    ``preview_rows`` holds the first raw rows so a UI can offer a manual
    column mapping.
    """
    preview_rows: List[List[str]]
    reason: str = "No header row with date, description and amount columns was found"
    ok = False


@dataclass
class NoTransactionsParsed:
    header_row_index: Optional[int] = None
    column_mapping: Optional[ColumnMapping] = None
    skipped_rows: int = 0
    reason: str = "No valid transactions found in the statement"
    ok = False


DetectionResult = Union[HeaderDetection, HeaderDetectionFailed]
ParseResult = Union[ParseSuccess, HeaderDetectionFailed, NoTransactionsParsed]


def mapping_to_dict(mapping: Optional[ColumnMapping]) -> Dict[str, int]:
    """Serialize a column mapping with role names as keys."""
    if not mapping:
        return {}
    return {role.value: index for role, index in mapping.items()}


def mapping_from_dict(data: Dict[str, object]) -> ColumnMapping:
    """Build a column mapping from ``{"date": 0, "debit": 4, ...}``.

    Raises ValueError for unknown role names or non-integer indices.
    """
    mapping: ColumnMapping = {}
    for key, value in data.items():
        try:
            role = ColumnRole(str(key).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown column role: {key!r}")
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"Column index for {key!r} must be an integer")
        index = int(value)
        if index < 0:
            raise ValueError(f"Column index for {key!r} must not be negative")
        mapping[role] = index
    return mapping
