"""Infer income/expense for document lines from running-balance deltas."""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models import TransactionType

logger = logging.getLogger(__name__)


@dataclass
class PendingTransaction:
    """A transaction read from a document line, possibly without a type yet."""
    date: str
    description: str
    amount: float
    balance: Optional[float]
    type: Optional[TransactionType] = None
    confidence: float = 0.8


def infer_type(running_balance: float, amount: float, reported_balance: float,
               tolerance: float = 1.0) -> Tuple[TransactionType, bool]:
    """Return ``(type, matched)``; ``matched`` is False when neither expectation
    lands within ``tolerance`` and the direction of the balance move decided."""
    expected_if_income = running_balance + amount
    expected_if_expense = running_balance - amount

    if abs(expected_if_income - reported_balance) < tolerance:
        return TransactionType.INCOME, True
    if abs(expected_if_expense - reported_balance) < tolerance:
        return TransactionType.EXPENSE, True
    if reported_balance > running_balance:
        return TransactionType.INCOME, False
    return TransactionType.EXPENSE, False


def apply_balance_inference(pending: Sequence[PendingTransaction],
                            opening_balance: Optional[float] = None,
                            tolerance: float = 1.0,
                            debug: bool = False) -> List[PendingTransaction]:
    """Fill in missing types in chronological order.

    The running balance is always reset to the reported balance of each
    line rather than the computed expectation, so drift in the statement
    does not accumulate.
    """
    running_balance = opening_balance or 0.0
    ordered = sorted(pending, key=lambda p: p.date)

    for trans in ordered:
        if trans.type is not None:
            if trans.balance is not None:
                running_balance = trans.balance
            continue

        if trans.balance is None:
            # Nothing to compare against.
            trans.type = TransactionType.EXPENSE
            trans.confidence = 0.5
            continue

        inferred, matched = infer_type(running_balance, trans.amount, trans.balance, tolerance)
        if not matched:
            logger.warning(f"Could not infer type for '{trans.description}'. "
                           f"PrevBal: {running_balance}, Amt: {trans.amount}, CurrBal: {trans.balance}")
            trans.confidence = 0.6
        elif debug:
            logger.debug(f"Inferred {inferred.value} for {trans.amount} (Bal: {trans.balance})")
        trans.type = inferred
        running_balance = trans.balance

    return ordered
