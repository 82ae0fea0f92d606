"""Read-side records produced by the grouping/aggregation views."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from finanai.models.enums import NotificationLevel, TransactionScope
from finanai.models.transaction import Transaction

ZERO = Decimal("0")


@dataclass
class LoanGroup:
    """Installment debt (card invoice, loan, financing) grouped by description."""

    id: str
    description: str
    category: str
    total_installments: int
    total_debt: Decimal = ZERO
    paid_amount: Decimal = ZERO
    remaining_amount: Decimal = ZERO
    current_installment: int = 0
    next_due_date: date | None = None
    next_amount: Decimal = ZERO
    progress: float = 0.0
    items: list[Transaction] = field(default_factory=list)


@dataclass
class LoanStats:
    """Totals across all open loan groups."""

    total_debt: Decimal
    monthly_commitment: Decimal


@dataclass
class EntityGroup:
    """Receivables/payables of one source entity."""

    id: str
    title: str
    type: TransactionScope
    items: list[Transaction]
    total: Decimal
    pending_count: int


@dataclass
class ReceivableStats:
    """Open totals of a receivables/payables listing."""

    total: Decimal
    overdue_value: Decimal
    overdue_count: int
    business_total: Decimal
    personal_total: Decimal


@dataclass
class PersonalWalletStats:
    """Personal scope balance for one month."""

    income: Decimal
    expense: Decimal
    balance: Decimal
    pending_income: Decimal
    pending_expense: Decimal


@dataclass
class Notification:
    """Due-date alert for an unpaid item."""

    id: str
    level: NotificationLevel
    title: str
    message: str
    days: int


@dataclass
class FinancialSummary:
    """Dashboard totals for a period."""

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    balance: Decimal = ZERO
    fixed_expenses: Decimal = ZERO
    variable_expenses: Decimal = ZERO
    pending_receivables: Decimal = ZERO
    overdue_receivables: Decimal = ZERO
    business_income: Decimal = ZERO
    business_expenses: Decimal = ZERO
    personal_income: Decimal = ZERO
    personal_expenses: Decimal = ZERO
