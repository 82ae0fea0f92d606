"""Lenient accessors shared by the views."""

from datetime import date
from decimal import Decimal
from typing import Iterable

from finanai.models.transaction import Transaction, parse_decimal
from finanai.models.views import ZERO


def amount_of(tx: Transaction) -> Decimal:
    """Amount of ``tx``, 0 when it is missing or not numeric."""
    try:
        return parse_decimal(tx.amount)
    except ValueError:
        return ZERO


def due_of(tx: Transaction) -> date | None:
    """Effective due date of ``tx``, or None when it has no usable date."""
    due = tx.due_date or tx.date
    return due if isinstance(due, date) else None


def total(items: Iterable[Transaction]) -> Decimal:
    return sum((amount_of(t) for t in items), ZERO)
