"""Receivables / payables listing, entity grouping and due-date alerts."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from finanai.dates import days_until, month_key
from finanai.models.company import Company
from finanai.models.enums import (
    NotificationLevel,
    ReceivableMode,
    TransactionScope,
    TransactionStatus,
    TransactionType,
)
from finanai.models.transaction import Transaction
from finanai.models.views import (
    EntityGroup,
    Notification,
    PersonalWalletStats,
    ReceivableStats,
)
from finanai.views.common import due_of, total

PERSONAL_GROUP_ID = "PERSONAL"
PERSONAL_GROUP_TITLE = "Carteira Pessoal"
LEGACY_GROUP_ID = "LEGACY"
LEGACY_GROUP_TITLE = "Outros / Sem Empresa"

_OPEN = (TransactionStatus.PENDING, TransactionStatus.OVERDUE)


@dataclass
class FilterCriteria:
    """Listing filters; ``None`` means no restriction on that field."""

    search: str = ""
    scope: TransactionScope | None = None
    company_id: str | None = None
    category: str | None = None
    status: TransactionStatus | None = None
    month: str | None = None


def in_mode(tx: Transaction, mode: ReceivableMode) -> bool:
    if mode == ReceivableMode.RECEIVABLES:
        return tx.type == TransactionType.INCOME
    return tx.type == TransactionType.EXPENSE or not tx.type


def filter_items(
    transactions: Iterable[Transaction],
    mode: ReceivableMode,
    criteria: FilterCriteria | None = None,
    companies: Iterable[Company] = (),
) -> list[Transaction]:
    """Items of ``mode`` matching ``criteria``, by effective due date.

    ``criteria.search`` matches case-insensitively against description,
    category and the owning company's name. ``criteria.month`` is a
    ``YYYY-MM`` key compared with the effective due date.
    """
    criteria = criteria or FilterCriteria()
    names = {c.id: c.name.lower() for c in companies}
    needle = criteria.search.lower()

    result = []
    for tx in transactions:
        if not in_mode(tx, mode):
            continue
        if needle and not (
            needle in (tx.description or "").lower()
            or needle in (tx.category or "").lower()
            or needle in names.get(tx.company_id, "")
        ):
            continue
        if criteria.scope is not None and tx.effective_scope != criteria.scope:
            continue
        if criteria.company_id is not None and tx.company_id != criteria.company_id:
            continue
        if criteria.category is not None and tx.category != criteria.category:
            continue
        if criteria.status is not None and tx.status != criteria.status:
            continue
        if criteria.month:
            due = due_of(tx)
            if due is None or month_key(due) != criteria.month:
                continue
        result.append(tx)

    result.sort(key=lambda t: (due_of(t) is None, due_of(t) or date.min))
    return result


def group_by_source_entity(
    transactions: Iterable[Transaction], companies: Iterable[Company]
) -> list[EntityGroup]:
    """Group items by the entity they belong to.

    One group per company for its BUSINESS items, then one personal
    wallet group, then a catch-all for BUSINESS items of companies not in
    ``companies``. Empty groups are omitted.
    """
    items = list(transactions)
    companies = list(companies)
    known = {c.id for c in companies}
    groups = []

    for company in companies:
        owned = [
            t
            for t in items
            if t.effective_scope == TransactionScope.BUSINESS and t.company_id == company.id
        ]
        if owned:
            groups.append(_group(company.id, company.name, TransactionScope.BUSINESS, owned))

    personal = [t for t in items if t.effective_scope == TransactionScope.PERSONAL]
    if personal:
        groups.append(
            _group(PERSONAL_GROUP_ID, PERSONAL_GROUP_TITLE, TransactionScope.PERSONAL, personal)
        )

    legacy = [
        t
        for t in items
        if t.effective_scope == TransactionScope.BUSINESS and t.company_id not in known
    ]
    if legacy:
        groups.append(
            _group(LEGACY_GROUP_ID, LEGACY_GROUP_TITLE, TransactionScope.BUSINESS, legacy)
        )
    return groups


def receivable_stats(items: Iterable[Transaction]) -> ReceivableStats:
    items = list(items)
    open_items = [t for t in items if t.status in _OPEN]
    overdue = [t for t in items if t.status == TransactionStatus.OVERDUE]
    return ReceivableStats(
        total=total(open_items),
        overdue_value=total(overdue),
        overdue_count=len(overdue),
        business_total=total(
            t for t in open_items if t.effective_scope == TransactionScope.BUSINESS
        ),
        personal_total=total(
            t for t in open_items if t.effective_scope == TransactionScope.PERSONAL
        ),
    )


def personal_wallet_stats(transactions: Iterable[Transaction], month: str) -> PersonalWalletStats:
    """Personal income and expense, paid or not, due in ``month`` (``YYYY-MM``)."""
    personal = [
        t
        for t in transactions
        if t.scope == TransactionScope.PERSONAL
        and due_of(t) is not None
        and month_key(due_of(t)) == month
    ]
    income = [t for t in personal if t.type == TransactionType.INCOME]
    expense = [t for t in personal if t.type == TransactionType.EXPENSE]
    return PersonalWalletStats(
        income=total(income),
        expense=total(expense),
        balance=total(income) - total(expense),
        pending_income=total(t for t in income if t.status != TransactionStatus.PAID),
        pending_expense=total(t for t in expense if t.status != TransactionStatus.PAID),
    )


def build_notifications(
    items: Iterable[Transaction],
    today: date,
    mode: ReceivableMode,
    limit: int = 5,
    warning_days: int = 3,
) -> list[Notification]:
    """Alerts for unpaid items that are overdue or due within ``warning_days``.

    Most urgent first (most overdue, then soonest due), at most ``limit``.
    """
    receivables = mode == ReceivableMode.RECEIVABLES
    alerts = []
    for tx in items:
        if not in_mode(tx, mode) or tx.status == TransactionStatus.PAID:
            continue
        due = due_of(tx)
        if due is None:
            continue
        days = days_until(due, today)

        if days < 0:
            alerts.append(
                Notification(
                    id=tx.id or "",
                    level=NotificationLevel.CRITICAL,
                    title="Atraso Detectado" if receivables else "Conta Vencida",
                    message=f"{tx.description} venceu há {abs(days)} dias.",
                    days=days,
                )
            )
        elif days <= warning_days:
            alerts.append(
                Notification(
                    id=tx.id or "",
                    level=NotificationLevel.WARNING,
                    title="Recebimento Próximo" if receivables else "Vencimento Próximo",
                    message=f"{tx.description} vence {_when(days)}.",
                    days=days,
                )
            )

    alerts.sort(key=lambda n: n.days)
    return alerts[:limit]


def _when(days: int) -> str:
    if days == 0:
        return "hoje"
    if days == 1:
        return "amanhã"
    return f"em {days} dias"


def _group(group_id: str, title: str, scope: TransactionScope, items: list) -> EntityGroup:
    return EntityGroup(
        id=group_id,
        title=title,
        type=scope,
        items=items,
        total=total(items),
        pending_count=sum(1 for t in items if t.status != TransactionStatus.PAID),
    )
