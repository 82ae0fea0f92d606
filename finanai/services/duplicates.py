"""Natural-key duplicate detection before inserts.

The guard is advisory: two writers can both pass the check for the same
key before either inserts. The store enforces no uniqueness on these keys.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union

from finanai.dates import month_bounds
from finanai.models.enums import TransactionType
from finanai.store.base import TRANSACTIONS, Filter, RecordStore, escape_like

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryKey:
    """Natural key of a user-entered transaction."""

    date: date
    amount: Decimal
    description: str
    type: TransactionType


@dataclass(frozen=True)
class InstallmentKey:
    """Natural key of a projected installment."""

    current: int
    total: int
    description_prefix: str


@dataclass(frozen=True)
class RecurrenceKey:
    """Natural key of a projected monthly recurrence.

    ``exclude_id`` names the seed record, which may itself be dated in the
    target month once it was paid late.
    """

    description: str
    target_date: date
    exclude_id: str | None = None


NaturalKey = Union[EntryKey, InstallmentKey, RecurrenceKey]


class DuplicateGuard:
    """Check the store for a record matching a natural key."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def exists(self, company_id: str, key: NaturalKey) -> bool:
        """Return True when a record with ``key`` exists for the company."""
        if isinstance(key, EntryKey):
            return await self.entry_exists(
                company_id, key.date, key.amount, key.description, key.type
            )
        if isinstance(key, InstallmentKey):
            return await self.installment_exists(
                company_id, key.current, key.total, key.description_prefix
            )
        return await self.recurrence_exists(
            company_id, key.description, key.target_date, key.exclude_id
        )

    async def entry_exists(
        self,
        company_id: str,
        booked: date,
        amount: Decimal,
        description: str,
        type: TransactionType,
    ) -> bool:
        flt = (
            Filter()
            .eq("company_id", company_id)
            .eq("date", booked)
            .eq("amount", amount)
            .eq("description", description)
            .eq("type", TransactionType(type).value)
        )
        return await self.store.count(TRANSACTIONS, flt) > 0

    async def installment_exists(
        self, company_id: str, current: int, total: int, description_prefix: str
    ) -> bool:
        flt = (
            Filter()
            .eq("company_id", company_id)
            .eq("installment_current", current)
            .eq("installment_total", total)
            .ilike("description", f"{escape_like(description_prefix)}%")
        )
        return await self.store.count(TRANSACTIONS, flt) > 0

    async def recurrence_exists(
        self,
        company_id: str,
        description: str,
        target_date: date,
        exclude_id: str | None = None,
    ) -> bool:
        first, last = month_bounds(target_date)
        flt = (
            Filter()
            .eq("company_id", company_id)
            .eq("description", description)
            .gte("date", first)
            .lte("date", last)
        )
        if exclude_id is not None:
            flt.neq("id", exclude_id)
        return await self.store.count(TRANSACTIONS, flt) > 0
