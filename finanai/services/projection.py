"""Projection of future installments and recurrences from a seed record."""

import asyncio
import logging
from dataclasses import dataclass, field

from finanai.dates import shift_months
from finanai.models.base import Event
from finanai.models.description import installment_description, strip_settlement_tags
from finanai.models.enums import TransactionStatus
from finanai.models.transaction import FixedInstallments, OpenEnded, Transaction
from finanai.services.duplicates import DuplicateGuard, InstallmentKey, NaturalKey, RecurrenceKey
from finanai.sinks.base import EventSink, emit
from finanai.sinks.serialization import to_dict
from finanai.store.base import TRANSACTIONS, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class ProjectionResult:
    """Outcome of one projection pass."""

    inserted: list[Transaction] = field(default_factory=list)
    skipped: int = 0
    failed: int = 0


class ProjectionEngine:
    """Persist the missing future occurrences of a seed transaction.

    Strictly additive: existing records are never updated or deleted, and
    the seed itself is left untouched whatever its status.
    """

    def __init__(
        self,
        store: RecordStore,
        guard: DuplicateGuard | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.store = store
        self.guard = guard or DuplicateGuard(store)
        self.events = events

    def candidates(self, seed: Transaction) -> list[tuple[Transaction, NaturalKey]]:
        """Compute every future record the seed implies, with its natural key.

        Installment series yield all remaining installments; open-ended
        recurrences yield only the next month.
        """
        mode = seed.recurrence
        start = seed.effective_due_date

        if isinstance(mode, FixedInstallments):
            base = seed.base_description
            result = []
            for index in range(mode.current + 1, mode.total + 1):
                due = shift_months(start, index - mode.current)
                candidate = self._clone(
                    seed,
                    description=installment_description(base, index, mode.total),
                    due=due,
                    is_recurring=False,
                    installment_current=index,
                    installment_total=mode.total,
                )
                result.append((candidate, InstallmentKey(index, mode.total, base)))
            return result

        if isinstance(mode, OpenEnded):
            description = strip_settlement_tags(seed.description)
            due = shift_months(start, 1)
            candidate = self._clone(
                seed,
                description=description,
                due=due,
                is_recurring=True,
                installment_current=None,
                installment_total=None,
            )
            return [(candidate, RecurrenceKey(description, due, seed.id))]

        return []

    async def project(self, seed: Transaction) -> ProjectionResult:
        """Insert the seed's missing future occurrences in one batch.

        Never raises: failed duplicate checks drop their candidate and a
        failed batch insert is logged.
        """
        result = ProjectionResult()
        candidates = self.candidates(seed)
        if not candidates:
            return result

        outcomes = await asyncio.gather(
            *(self.guard.exists(seed.company_id, key) for _, key in candidates),
            return_exceptions=True,
        )

        missing = []
        for (candidate, _), outcome in zip(candidates, outcomes):
            if isinstance(outcome, BaseException):
                result.failed += 1
                logger.warning(
                    "Duplicate check failed for %r (%s): %s",
                    candidate.description,
                    candidate.date,
                    outcome,
                )
            elif outcome:
                result.skipped += 1
            else:
                missing.append(candidate)

        if not missing:
            return result

        missing.sort(key=lambda t: t.date)
        try:
            rows = await self.store.insert(TRANSACTIONS, [t.to_record() for t in missing])
            result.inserted = [Transaction.from_record(row) for row in rows]
        except Exception as e:
            result.failed += len(missing)
            logger.warning("Projection insert failed for %r: %s", seed.description, e)
            return result

        logger.info(
            "Projected %d future transactions from %r", len(result.inserted), seed.description
        )
        for tx in result.inserted:
            emit(
                self.events,
                Event.create(
                    "transaction.projected",
                    source="projection",
                    subject=tx.id or "",
                    data=to_dict(tx),
                    company_id=tx.company_id,
                    seed_id=seed.id,
                ),
            )
        return result

    @staticmethod
    def _clone(seed: Transaction, *, description, due, **changes) -> Transaction:
        return Transaction(
            company_id=seed.company_id,
            user_id=seed.user_id,
            category_id=seed.category_id,
            category=seed.category,
            description=description,
            amount=seed.amount,
            type=seed.type,
            status=TransactionStatus.PENDING,
            cost_type=seed.cost_type,
            scope=seed.scope,
            date=due,
            due_date=due,
            **changes,
        )
