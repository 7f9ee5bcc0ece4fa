"""Final validation pass over parsed transactions."""
import logging
import re
from typing import Iterable, List, Sequence

from .models import NormalizedTransaction
from .settings import SUMMARY_MARKERS
from .utils import collapse_whitespace

logger = logging.getLogger(__name__)


def is_summary_text(text: str, markers: Sequence[str] = SUMMARY_MARKERS) -> bool:
    """True when a description opens with a summary word ('Total', 'Closing Balance', ...)."""
    words = re.findall(r'[a-z]+', (text or '').lower())
    return bool(words) and words[0] in markers


def is_summary_row(first_cell: str, markers: Sequence[str] = SUMMARY_MARKERS) -> bool:
    """Summary or separator row, judged from the first cell."""
    cell = (first_cell or '').lower()
    if '*' in cell:
        return True
    return any(marker in cell for marker in markers)


def cleanup_transactions(transactions: Iterable[NormalizedTransaction],
                         markers: Sequence[str] = SUMMARY_MARKERS,
                         debug: bool = False) -> List[NormalizedTransaction]:
    """Drop summary and non-positive entries, tidy descriptions, sort by date."""
    cleaned: List[NormalizedTransaction] = []
    dropped = 0
    for trans in transactions:
        description = collapse_whitespace(trans.description)
        if not trans.date or trans.amount <= 0 or is_summary_text(description, markers):
            dropped += 1
            if debug:
                logger.debug(f"Dropping transaction during cleanup: {trans}")
            continue
        trans.description = description
        cleaned.append(trans)

    # Stable: same-day entries keep statement order.
    cleaned.sort(key=lambda t: t.date)

    if dropped:
        logger.info(f"Cleanup: {dropped} entries dropped, {len(cleaned)} kept")
    return cleaned
