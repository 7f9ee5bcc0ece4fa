"""Parser configuration and environment-driven runtime settings."""
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from dotenv import load_dotenv

from .models import ColumnRole

# Header aliases per column role, all lowercase.
HEADER_ALIASES: Mapping[ColumnRole, Tuple[str, ...]] = MappingProxyType({
    ColumnRole.DATE: (
        'date', 'txn date', 'transaction date', 'tran date', 'posting date',
        'value date', 'value dt', 'dt',
    ),
    ColumnRole.DESCRIPTION: (
        'description', 'narration', 'particulars', 'details',
        'transaction details', 'remarks', 'memo',
    ),
    ColumnRole.AMOUNT: (
        'amount', 'txn amount', 'transaction amount',
        'withdrawal(dr)/deposit(cr)', 'debit/credit', 'withdrawal/deposit',
    ),
    ColumnRole.DEBIT: (
        'debit', 'withdrawal', 'withdrawals', 'withdrawal amt', 'debit amount',
        'dr amount', 'money out', 'paid out',
    ),
    ColumnRole.CREDIT: (
        'credit', 'deposit', 'deposits', 'deposit amt', 'credit amount',
        'cr amount', 'money in', 'paid in',
    ),
    ColumnRole.BALANCE: (
        'balance', 'closing balance', 'running balance', 'available balance', 'bal',
    ),
    ColumnRole.TYPE: (
        'type', 'dr/cr', 'cr/dr', 'txn type', 'transaction type',
    ),
})

INCOME_TYPE_KEYWORDS: FrozenSet[str] = frozenset({'credit', 'cr', 'deposit', 'income'})
SUMMARY_MARKERS: Tuple[str, ...] = ('total', 'opening', 'closing', 'balance')


@dataclass(frozen=True)
class ParserConfig:
    """Tunables for a parse. Instances are immutable and safe to share."""
    header_aliases: Mapping[ColumnRole, Tuple[str, ...]] = field(default_factory=lambda: HEADER_ALIASES)
    header_scan_rows: int = 30
    preview_rows: int = 20
    income_type_keywords: FrozenSet[str] = INCOME_TYPE_KEYWORDS
    summary_markers: Tuple[str, ...] = SUMMARY_MARKERS
    line_tolerance: float = 5.0
    balance_tolerance: float = 1.0
    date_serial_min: float = 20000
    date_serial_max: float = 80000


DEFAULT_CONFIG = ParserConfig()


@dataclass(frozen=True)
class Settings:
    max_upload_mb: int = 16
    log_dir: str = 'logs'
    log_level: str = 'INFO'
    allowed_extensions: FrozenSet[str] = frozenset({'pdf', 'csv', 'txt', 'xls', 'xlsx', 'xlsm'})

    @property
    def max_content_length(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_settings() -> Settings:
    """Read settings from the environment (and a ``.env`` file if present)."""
    load_dotenv()
    extensions = os.environ.get('STATEMENT_ALLOWED_EXTENSIONS')
    return Settings(
        max_upload_mb=int(os.environ.get('STATEMENT_MAX_UPLOAD_MB', '16')),
        log_dir=os.environ.get('STATEMENT_LOG_DIR', 'logs'),
        log_level=os.environ.get('STATEMENT_LOG_LEVEL', 'INFO').upper(),
        allowed_extensions=(
            frozenset(e.strip().lower().lstrip('.') for e in extensions.split(',') if e.strip())
            if extensions else Settings.allowed_extensions
        ),
    )
