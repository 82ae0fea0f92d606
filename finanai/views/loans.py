"""Loan / card invoice grouping."""

from datetime import date
from decimal import Decimal
from typing import Iterable

from finanai.models.description import strip_installment_suffix, strip_settlement_tags
from finanai.models.enums import TransactionStatus, TransactionType
from finanai.models.transaction import Transaction, quantize
from finanai.models.views import ZERO, LoanGroup, LoanStats
from finanai.views.common import amount_of, due_of, total

LOAN_KEYWORDS = ("cartão", "credit", "loan", "empréstimo", "financiamento", "parcela", "fatura")

EPSILON = Decimal("0.01")

_OPEN = (TransactionStatus.PENDING, TransactionStatus.OVERDUE)


def is_loan_item(tx: Transaction) -> bool:
    """True for expenses that are installments or look like debt."""
    if tx.type != TransactionType.EXPENSE:
        return False
    if tx.installment_total is not None and tx.installment_total >= 1:
        return True
    category = (tx.category or "").lower()
    description = (tx.description or "").lower()
    return any(k in category or k in description for k in LOAN_KEYWORDS)


def loan_key(tx: Transaction) -> str:
    """Group key: description without installment suffix and settlement tags."""
    return strip_settlement_tags(strip_installment_suffix(tx.description))


def group_loans(transactions: Iterable[Transaction]) -> list[LoanGroup]:
    """Group installment debt by description.

    Returns open groups (something left to pay, or a pending item) sorted by
    remaining amount, largest first.
    """
    groups: dict[str, LoanGroup] = {}

    for tx in transactions:
        if not is_loan_item(tx):
            continue
        key = loan_key(tx)
        group = groups.get(key)
        if group is None:
            group = groups[key] = LoanGroup(
                id=key,
                description=key,
                category=tx.category,
                total_installments=tx.installment_total or 1,
            )
        group.items.append(tx)

        amount = amount_of(tx)
        if tx.status == TransactionStatus.PAID:
            group.paid_amount += amount

        due = due_of(tx)
        if tx.status in _OPEN and due is not None:
            if group.next_due_date is None or due < group.next_due_date:
                group.next_due_date = due
                group.next_amount = amount
                group.current_installment = tx.installment_current or 1

        if tx.installment_total and tx.installment_total > group.total_installments:
            group.total_installments = tx.installment_total

    result = []
    for group in groups.values():
        group.items.sort(key=_item_order)
        group.total_debt = total(group.items)
        group.remaining_amount = quantize(group.total_debt - group.paid_amount)
        if group.remaining_amount < EPSILON:
            group.remaining_amount = ZERO
        group.progress = (
            float(group.paid_amount / group.total_debt * 100) if group.total_debt > 0 else 0.0
        )
        if group.remaining_amount > EPSILON or group.next_due_date is not None:
            result.append(group)

    result.sort(key=lambda g: g.remaining_amount, reverse=True)
    return result


def loan_stats(groups: Iterable[LoanGroup]) -> LoanStats:
    """Outstanding debt and the amount due this cycle across ``groups``."""
    stats = LoanStats(total_debt=ZERO, monthly_commitment=ZERO)
    for group in groups:
        stats.total_debt += group.remaining_amount
        if group.progress < 100:
            stats.monthly_commitment += group.next_amount
    return stats


def _item_order(tx: Transaction):
    due = due_of(tx)
    return (due is None, due or date.min, tx.installment_current or 0)
