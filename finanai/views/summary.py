"""Dashboard totals."""

from typing import Iterable

from finanai.dates import month_key
from finanai.models.enums import CostType, TransactionScope, TransactionStatus, TransactionType
from finanai.models.transaction import Transaction
from finanai.models.views import FinancialSummary
from finanai.views.common import amount_of


def financial_summary(
    transactions: Iterable[Transaction], month: str | None = None
) -> FinancialSummary:
    """Totals of ``transactions`` booked in ``month`` (``YYYY-MM``), or all.

    Income only counts towards the balance once PAID; open income is split
    into pending and overdue receivables. Every expense counts, whatever its
    status.
    """
    summary = FinancialSummary()
    for tx in transactions:
        if month is not None and (tx.date is None or month_key(tx.date) != month):
            continue
        amount = amount_of(tx)
        business = tx.effective_scope == TransactionScope.BUSINESS

        if tx.type == TransactionType.INCOME:
            if tx.status == TransactionStatus.PAID:
                summary.total_income += amount
                summary.balance += amount
                if business:
                    summary.business_income += amount
                else:
                    summary.personal_income += amount
            elif tx.status == TransactionStatus.PENDING:
                summary.pending_receivables += amount
            elif tx.status == TransactionStatus.OVERDUE:
                summary.overdue_receivables += amount
            continue

        summary.total_expenses += amount
        summary.balance -= amount
        if business:
            summary.business_expenses += amount
        else:
            summary.personal_expenses += amount
        if tx.cost_type == CostType.FIXED:
            summary.fixed_expenses += amount
        else:
            summary.variable_expenses += amount
    return summary
