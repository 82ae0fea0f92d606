"""Payment confirmation: full, partial and bulk settlement."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable

from finanai.exceptions import EntityNotFoundError, PartialCompletionFailure, ValidationError
from finanai.intake import parse_amount
from finanai.logging import company_logger
from finanai.models.base import Event
from finanai.models.description import PARTIAL_PAID_TAG, REMAINDER_TAG, strip_settlement_tags, tag
from finanai.models.enums import TransactionStatus
from finanai.models.transaction import NoRecurrence, Transaction, quantize
from finanai.services.common import persist
from finanai.services.projection import ProjectionEngine
from finanai.services.tasks import BackgroundTasks
from finanai.sinks.base import EventSink, emit
from finanai.sinks.serialization import to_dict
from finanai.store.base import TRANSACTIONS, Filter, RecordStore

EPSILON = Decimal("0.01")


@dataclass
class SettlementResult:
    """Original record after payment and the remainder it spawned, if any."""

    updated: Transaction
    spawned: Transaction | None = None


class SettlementService:
    """Register payments against pending obligations."""

    def __init__(
        self,
        store: RecordStore,
        engine: ProjectionEngine | None = None,
        tasks: BackgroundTasks | None = None,
        clock: Callable[[], date] = date.today,
        events: EventSink | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.tasks = tasks
        self.clock = clock
        self.events = events

    async def get(self, company_id: str, transaction_id: str) -> Transaction:
        """Load one transaction of the company."""
        flt = Filter().eq("id", transaction_id).eq("company_id", company_id)
        rows = await persist(self.store.query(TRANSACTIONS, flt, limit=1), "Loading transaction")
        if not rows:
            raise EntityNotFoundError(f"Transaction {transaction_id} not found")
        return Transaction.from_record(rows[0])

    async def settle_partial(
        self,
        company_id: str,
        transaction_id: str,
        paid_amount: Any,
        paid_date: date,
    ) -> SettlementResult:
        """Pay ``paid_amount`` of a pending obligation.

        A payment below the full amount marks the original PAID at the
        paid value and inserts a PENDING remainder for the difference.

        Raises
        ------
        ValidationError
            If the record is already PAID, or the amount is not positive,
            not numeric or exceeds the original amount.
        PartialCompletionFailure
            If the original was updated but the remainder was not created.
        """
        paid = quantize(parse_amount(paid_amount))
        if paid <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        original = await self.get(company_id, transaction_id)
        _require_open(original)
        if paid > original.amount:
            raise ValidationError(
                f"Payment {paid} exceeds the original amount {original.amount}"
            )

        remaining = quantize(original.amount - paid)
        is_partial = remaining >= EPSILON
        description = (
            tag(original.description, PARTIAL_PAID_TAG)
            if is_partial
            else strip_settlement_tags(original.description)
        )

        row = await persist(
            self.store.update(
                TRANSACTIONS,
                transaction_id,
                {
                    "status": TransactionStatus.PAID.value,
                    "amount": paid,
                    "date": paid_date,
                    "due_date": original.effective_due_date,
                    "description": description,
                },
            ),
            "Registering payment",
        )
        updated = Transaction.from_record(row)
        self._emit("transaction.settled", updated, partial=is_partial)

        if not is_partial:
            return SettlementResult(updated=updated)

        remainder = original.evolve(
            id=None,
            created_at=None,
            status=TransactionStatus.PENDING,
            amount=remaining,
            date=original.effective_due_date,
            description=tag(original.description, REMAINDER_TAG),
        )
        log = company_logger(__name__, company_id, transaction_id=transaction_id)
        try:
            spawned_row = await self.store.insert_one(TRANSACTIONS, remainder.to_record())
        except Exception as e:
            log.error(
                "Payment of %s registered but remainder %s was not created: %s", paid, remaining, e
            )
            raise PartialCompletionFailure(
                f"Payment registered, but the remaining balance of {remaining} "
                f"could not be created: {e}",
                updated=updated,
            ) from e

        spawned = Transaction.from_record(spawned_row)
        self._emit("transaction.created", spawned, origin=transaction_id)
        log.info(
            "Partial payment: paid %s, remainder %s created as %s", paid, remaining, spawned.id
        )
        return SettlementResult(updated=updated, spawned=spawned)

    async def confirm_payment(
        self,
        company_id: str,
        transaction_id: str,
        amount: Any,
        paid_date: date | None = None,
    ) -> Transaction:
        """Mark a receivable/payable PAID with its final amount and date.

        Recurring and installment records then get their next occurrence
        projected in the background. The due date is kept, so the next
        occurrence follows the billing cycle and not the payment date.

        Raises
        ------
        ValidationError
            If the record is already PAID or the amount is not numeric.
        """
        final_amount = abs(parse_amount(amount))
        original = await self.get(company_id, transaction_id)
        _require_open(original)

        row = await persist(
            self.store.update(
                TRANSACTIONS,
                transaction_id,
                {
                    "status": TransactionStatus.PAID.value,
                    "amount": final_amount,
                    "date": paid_date or self.clock(),
                    "due_date": original.effective_due_date,
                },
            ),
            "Confirming payment",
        )
        updated = Transaction.from_record(row)
        self._emit("transaction.settled", updated, partial=False)

        if self.engine is not None and not isinstance(updated.recurrence, NoRecurrence):
            if self.tasks is not None:
                engine = self.engine
                self.tasks.submit(lambda: engine.project(updated), f"project:{updated.id}")
            else:
                await self.engine.project(updated)
        return updated

    async def settle_all(
        self,
        company_id: str,
        items: Iterable[Transaction],
        paid_date: date | None = None,
    ) -> list[Transaction]:
        """Mark every non-PAID item of a group as PAID in one write."""
        ids = [t.id for t in items if t.id and t.status != TransactionStatus.PAID]
        if not ids:
            raise ValidationError("No pending items to settle")

        flt = Filter().eq("company_id", company_id).in_("id", ids)
        rows = await persist(self.store.query(TRANSACTIONS, flt), "Loading group")
        pending = [r["id"] for r in rows if r.get("status") != TransactionStatus.PAID.value]
        if not pending:
            raise ValidationError("No pending items to settle")

        settled_rows = await persist(
            self.store.update_many(
                TRANSACTIONS,
                pending,
                {"status": TransactionStatus.PAID.value, "date": paid_date or self.clock()},
            ),
            "Bulk settlement",
        )
        settled = [Transaction.from_record(r) for r in settled_rows]
        company_logger(__name__, company_id).info("Settled %d transactions", len(settled))
        for tx in settled:
            self._emit("transaction.settled", tx, partial=False)
        return settled

    def _emit(self, event_type: str, tx: Transaction, **metadata: Any) -> None:
        emit(
            self.events,
            Event.create(
                event_type,
                source="settlement",
                subject=tx.id or "",
                data=to_dict(tx),
                company_id=tx.company_id,
                **metadata,
            ),
        )


def _require_open(tx: Transaction) -> None:
    if tx.status == TransactionStatus.PAID:
        raise ValidationError(f"Transaction {tx.id} is already paid")
