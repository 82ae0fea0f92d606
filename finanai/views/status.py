"""Read-time status derivation."""

from datetime import date
from typing import Iterable

from finanai.models.enums import TransactionStatus
from finanai.models.transaction import Transaction


def display_status(tx: Transaction, today: date) -> TransactionStatus:
    """Status to show for ``tx`` on ``today``.

    A PENDING item whose due date has passed is presented as OVERDUE. The
    stored record is not changed.
    """
    if tx.status == TransactionStatus.PENDING and tx.effective_due_date < today:
        return TransactionStatus.OVERDUE
    return tx.status


def with_display_status(transactions: Iterable[Transaction], today: date) -> list[Transaction]:
    """Copies of ``transactions`` carrying their display status."""
    result = []
    for tx in transactions:
        status = display_status(tx, today)
        result.append(tx if status == tx.status else tx.evolve(status=status))
    return result
