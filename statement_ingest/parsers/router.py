"""Amount and transaction-type resolution for tabular rows.

The strategy is picked from the set of roles present in the column mapping;
each strategy is a plain function registered in ``STRATEGY_REGISTRY``.
"""
import logging
import re
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from ..errors import RowParseSkipped
from ..models import ColumnMapping, ColumnRole, Resolution, TransactionType
from ..settings import DEFAULT_CONFIG, ParserConfig
from ..utils import amount_is_negative, cell_text, normalize_amount

logger = logging.getLogger(__name__)

INCOME_MARKER = re.compile(r'(?<![a-z])(cr|credit)(?![a-z])', re.IGNORECASE)
EXPENSE_MARKER = re.compile(r'(?<![a-z])(dr|debit)(?![a-z])', re.IGNORECASE)
WORD = re.compile(r'[a-z]+')

Strategy = Callable[[Sequence[str], ColumnMapping, ParserConfig], Resolution]
Selector = Callable[[FrozenSet[ColumnRole]], bool]


def _cell(row: Sequence[str], mapping: ColumnMapping, role: ColumnRole) -> str:
    idx = mapping.get(role)
    if idx is None or idx >= len(row):
        return ''
    return cell_text(row[idx])


def resolve_dual_column(row: Sequence[str], mapping: ColumnMapping,
                        config: ParserConfig) -> Resolution:
    """Separate Debit and Credit columns; exactly one must be positive."""
    debit = normalize_amount(_cell(row, mapping, ColumnRole.DEBIT))
    credit = normalize_amount(_cell(row, mapping, ColumnRole.CREDIT))
    if debit > 0 and credit > 0:
        raise RowParseSkipped(f"both debit ({debit}) and credit ({credit}) are set")
    if debit > 0:
        return Resolution(debit, TransactionType.EXPENSE, 0.9)
    if credit > 0:
        return Resolution(credit, TransactionType.INCOME, 0.9)
    raise RowParseSkipped("neither debit nor credit has a value")


def resolve_typed_amount(row: Sequence[str], mapping: ColumnMapping,
                         config: ParserConfig) -> Resolution:
    """Amount column plus an explicit type column (Cr/Dr, Credit/Debit, ...)."""
    amount = normalize_amount(_cell(row, mapping, ColumnRole.AMOUNT))
    type_words = set(WORD.findall(_cell(row, mapping, ColumnRole.TYPE).lower()))
    if type_words & config.income_type_keywords:
        return Resolution(amount, TransactionType.INCOME, 0.9)
    return Resolution(amount, TransactionType.EXPENSE, 0.9)


def resolve_single_amount(row: Sequence[str], mapping: ColumnMapping,
                          config: ParserConfig) -> Resolution:
    """One amount column whose direction comes from markers or sign."""
    raw = _cell(row, mapping, ColumnRole.AMOUNT)
    amount = normalize_amount(raw)
    if INCOME_MARKER.search(raw):
        return Resolution(amount, TransactionType.INCOME, 0.85)
    if EXPENSE_MARKER.search(raw):
        return Resolution(amount, TransactionType.EXPENSE, 0.85)
    if amount_is_negative(raw):
        return Resolution(amount, TransactionType.EXPENSE, 0.8)
    # Unmarked, non-negative: direction unknown, defaulted to expense.
    return Resolution(amount, TransactionType.EXPENSE, 0.5)


def resolve_single_sided(row: Sequence[str], mapping: ColumnMapping,
                         config: ParserConfig) -> Resolution:
    """Only one of Debit/Credit exists; its values carry that direction."""
    if ColumnRole.DEBIT in mapping:
        role, tx_type = ColumnRole.DEBIT, TransactionType.EXPENSE
    else:
        role, tx_type = ColumnRole.CREDIT, TransactionType.INCOME
    amount = normalize_amount(_cell(row, mapping, role))
    if amount <= 0:
        raise RowParseSkipped(f"{role.value} column has no value")
    return Resolution(amount, tx_type, 0.9)


STRATEGY_REGISTRY: List[Tuple[str, Selector, Strategy]] = [
    ('dual_column',
     lambda roles: ColumnRole.DEBIT in roles and ColumnRole.CREDIT in roles,
     resolve_dual_column),
    ('typed_amount',
     lambda roles: ColumnRole.AMOUNT in roles and ColumnRole.TYPE in roles,
     resolve_typed_amount),
    ('single_amount',
     lambda roles: ColumnRole.AMOUNT in roles and not roles & {ColumnRole.DEBIT, ColumnRole.CREDIT},
     resolve_single_amount),
    ('single_sided',
     lambda roles: len(roles & {ColumnRole.DEBIT, ColumnRole.CREDIT}) == 1,
     resolve_single_sided),
]


def select_strategy(mapping: ColumnMapping) -> Optional[Tuple[str, Strategy]]:
    """Return ``(name, strategy)`` for the first registered strategy that fits."""
    roles = frozenset(mapping)
    for name, selector, strategy in STRATEGY_REGISTRY:
        if selector(roles):
            return name, strategy
    return None


def resolve_amount_type(row: Sequence[str], mapping: ColumnMapping,
                        config: ParserConfig = DEFAULT_CONFIG) -> Resolution:
    """Resolve ``{amount, type}`` for a row; raises RowParseSkipped if invalid."""
    selected = select_strategy(mapping)
    if selected is None:
        raise RowParseSkipped("column mapping has no amount-bearing column")
    _, strategy = selected
    return strategy(row, mapping, config)
