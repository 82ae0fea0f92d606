"""Transaction CRUD with duplicate guarding and background projection."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable

from finanai.dates import shift_months
from finanai.exceptions import EntityNotFoundError, ValidationError
from finanai.intake import parse_amount
from finanai.models.base import Event
from finanai.models.company import Category
from finanai.models.description import installment_description
from finanai.models.enums import (
    AddOutcome,
    TransactionScope,
    TransactionStatus,
    TransactionType,
    UserRole,
)
from finanai.models.transaction import NoRecurrence, Transaction, quantize
from finanai.services.common import persist
from finanai.services.duplicates import DuplicateGuard, EntryKey
from finanai.services.projection import ProjectionEngine
from finanai.services.sync import ReconciliationSync
from finanai.services.tasks import BackgroundTasks
from finanai.sinks.base import EventSink, emit
from finanai.sinks.serialization import to_dict
from finanai.store.base import CATEGORIES, TRANSACTIONS, Filter, RecordStore
from finanai.views.status import with_display_status

logger = logging.getLogger(__name__)

DEFAULT_LOAN_CATEGORY = "Cartão de Crédito"

# Fields a caller may never change through update_transaction.
_IMMUTABLE_FIELDS = ("id", "company_id", "created_at")


@dataclass
class AddResult:
    """Outcome of ``add_transaction``."""

    outcome: AddOutcome
    transaction: Transaction | None = None


class TransactionService:
    """Foreground entry point for reading and writing transactions.

    Writes are awaited and fail loudly with ``PersistenceFailure``;
    projection and sync are handed to the background queue.
    """

    def __init__(
        self,
        store: RecordStore,
        guard: DuplicateGuard | None = None,
        engine: ProjectionEngine | None = None,
        tasks: BackgroundTasks | None = None,
        clock: Callable[[], date] = date.today,
        events: EventSink | None = None,
        lookback_months: int = 2,
    ) -> None:
        self.store = store
        self.guard = guard or DuplicateGuard(store)
        self.engine = engine or ProjectionEngine(store, self.guard, events)
        self.tasks = tasks or BackgroundTasks()
        self.clock = clock
        self.events = events
        self.sync = ReconciliationSync(store, self.engine, clock, lookback_months)

    async def add_transaction(self, payload: Transaction | dict[str, Any]) -> AddResult:
        """Insert a transaction unless an identical entry already exists.

        Raises
        ------
        ValidationError
            If the payload has no company or fails validation.
        PersistenceFailure
            If the insert fails.
        """
        if isinstance(payload, dict):
            if not payload.get("company_id"):
                raise ValidationError("Transaction must belong to a company (company_id missing)")
            tx = Transaction.from_record(payload)
        else:
            tx = payload

        key = EntryKey(tx.date, tx.amount, tx.description, tx.type)
        try:
            if await self.guard.exists(tx.company_id, key):
                logger.info("Skipping duplicate transaction %r on %s", tx.description, tx.date)
                return AddResult(AddOutcome.DUPLICATE_SKIPPED)
        except Exception as e:
            logger.warning("Duplicate check failed for %r, inserting anyway: %s", tx.description, e)

        record = tx.to_record()
        record.pop("id", None)
        record.pop("created_at", None)
        row = await persist(self.store.insert_one(TRANSACTIONS, record), "Saving transaction")
        created = Transaction.from_record(row)
        self._emit("transaction.created", created)
        self._schedule_projection(created)
        return AddResult(AddOutcome.CREATED, created)

    async def update_transaction(
        self, company_id: str, transaction_id: str, updates: dict[str, Any]
    ) -> Transaction:
        """Apply a partial update after validating the merged record."""
        current = await self.get(company_id, transaction_id)
        changes = {k: v for k, v in updates.items() if k not in _IMMUTABLE_FIELDS}
        if not changes:
            return current

        merged = Transaction.from_record({**current.to_record(), **changes})
        record = merged.to_record()
        fields = {k: record[k] for k in changes if k in record}

        row = await persist(
            self.store.update(TRANSACTIONS, transaction_id, fields), "Updating transaction"
        )
        updated = Transaction.from_record(row)
        self._emit("transaction.updated", updated)
        # Only a change to the recurrence itself implies new occurrences
        if "is_recurring" in changes or "installment_total" in changes:
            self._schedule_projection(updated)
        return updated

    async def delete_transaction(self, company_id: str, transaction_id: str) -> None:
        await self.get(company_id, transaction_id)
        await persist(self.store.delete(TRANSACTIONS, transaction_id), "Deleting transaction")
        emit(
            self.events,
            Event.create(
                "transaction.deleted",
                source="transactions",
                subject=transaction_id,
                data={"id": transaction_id},
                company_id=company_id,
            ),
        )

    async def get(self, company_id: str, transaction_id: str) -> Transaction:
        flt = Filter().eq("id", transaction_id).eq("company_id", company_id)
        rows = await persist(self.store.query(TRANSACTIONS, flt, limit=1), "Loading transaction")
        if not rows:
            raise EntityNotFoundError(f"Transaction {transaction_id} not found")
        return Transaction.from_record(rows[0])

    async def list_transactions(
        self,
        company_id: str,
        user_id: str | None = None,
        role: UserRole = UserRole.USER,
        today: date | None = None,
    ) -> list[Transaction]:
        """List a company's transactions, newest first, with display status.

        Plain users only see their own records.
        """
        flt = Filter().eq("company_id", company_id)
        if role == UserRole.USER and user_id:
            flt.eq("user_id", user_id)

        rows = await persist(
            self.store.query(TRANSACTIONS, flt, order_by="date", descending=True),
            "Listing transactions",
        )
        transactions = []
        for row in rows:
            try:
                transactions.append(Transaction.from_record(row))
            except ValidationError as e:
                logger.warning("Skipping malformed record %s: %s", row.get("id"), e)
        return with_display_status(transactions, today or self.clock())

    async def list_categories(self, company_id: str) -> list[Category]:
        """Categories defined by the company, by name."""
        rows = await persist(
            self.store.query(CATEGORIES, Filter().eq("company_id", company_id), order_by="name"),
            "Listing categories",
        )
        return [Category.from_record(row) for row in rows]

    async def create_installment_plan(
        self,
        company_id: str,
        description: str,
        total_amount: Any,
        installments: int,
        first_due_date: date,
        *,
        user_id: str | None = None,
        category: str | None = None,
        category_id: str | None = None,
        scope: TransactionScope = TransactionScope.BUSINESS,
    ) -> list[Transaction]:
        """Book a card invoice or loan as ``installments`` monthly records.

        The total is split in cents; the rounding residue goes to the last
        installment so the parts add up to the total.
        """
        total = quantize(parse_amount(total_amount))
        if not description or not description.strip():
            raise ValidationError("Installment plan needs a description")
        if total <= 0:
            raise ValidationError("Installment plan total must be greater than zero")
        if installments < 1:
            raise ValidationError("Installment plan needs at least one installment")

        portion = quantize(total / Decimal(installments))
        plan = []
        for index in range(1, installments + 1):
            amount = portion if index < installments else total - portion * (installments - 1)
            due = shift_months(first_due_date, index - 1)
            plan.append(
                Transaction(
                    company_id=company_id,
                    user_id=user_id,
                    description=installment_description(description.strip(), index, installments),
                    amount=amount,
                    type=TransactionType.EXPENSE,
                    status=TransactionStatus.PENDING,
                    date=due,
                    due_date=due,
                    category_id=category_id,
                    category=category or DEFAULT_LOAN_CATEGORY,
                    scope=scope,
                    is_recurring=False,
                    installment_current=index,
                    installment_total=installments,
                )
            )

        rows = await persist(
            self.store.insert(TRANSACTIONS, [t.to_record() for t in plan]),
            "Creating installment plan",
        )
        created = [Transaction.from_record(row) for row in rows]
        logger.info(
            "Created installment plan %r: %d x %s", description, installments, portion
        )
        for tx in created:
            self._emit("transaction.created", tx)
        return created

    def start_sync(self, company_id: str) -> None:
        """Queue a reconciliation pass for the company."""
        sync = self.sync
        self.tasks.submit(lambda: sync.sync(company_id), f"sync:{company_id}")

    def _schedule_projection(self, tx: Transaction) -> None:
        if isinstance(tx.recurrence, NoRecurrence):
            return
        engine = self.engine
        self.tasks.submit(lambda: engine.project(tx), f"project:{tx.id}")

    def _emit(self, event_type: str, tx: Transaction) -> None:
        emit(
            self.events,
            Event.create(
                event_type,
                source="transactions",
                subject=tx.id or "",
                data=to_dict(tx),
                company_id=tx.company_id,
            ),
        )
