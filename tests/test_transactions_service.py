"""Tests for the transaction service."""

from datetime import date
from decimal import Decimal

import pytest

from finanai.exceptions import EntityNotFoundError, PersistenceFailure, ValidationError
from finanai.models.enums import AddOutcome, TransactionStatus, UserRole
from finanai.services.tasks import BackgroundTasks
from finanai.services.transactions import TransactionService
from finanai.models.company import Category
from finanai.store import CATEGORIES, TRANSACTIONS, Filter, InMemoryRecordStore


class _BrokenGuard:
    async def exists(self, company_id, key) -> bool:
        raise ConnectionError("guard offline")


class _ReadOnlyStore(InMemoryRecordStore):
    async def insert(self, table, records):
        raise ConnectionError("read-only replica")


@pytest.fixture
def tasks() -> BackgroundTasks:
    return BackgroundTasks()


@pytest.fixture
def service(store, tasks, clock) -> TransactionService:
    return TransactionService(store, tasks=tasks, clock=clock)


class TestAddTransaction:
    """Tests for TransactionService.add_transaction."""

    async def test_creates(self, service, make_tx) -> None:
        result = await service.add_transaction(make_tx())
        assert result.outcome == AddOutcome.CREATED
        assert result.transaction.id is not None

    async def test_duplicate_skipped(self, service, store, make_tx) -> None:
        await service.add_transaction(make_tx())
        result = await service.add_transaction(make_tx())

        assert result.outcome == AddOutcome.DUPLICATE_SKIPPED
        assert result.transaction is None
        assert await store.count(TRANSACTIONS) == 1

    async def test_dict_payload_requires_company(self, service) -> None:
        with pytest.raises(ValidationError):
            await service.add_transaction({"description": "x", "amount": 1, "date": "2024-05-01"})

    async def test_dict_payload_validated(self, service, company_id) -> None:
        with pytest.raises(ValidationError):
            await service.add_transaction(
                {"company_id": company_id, "amount": "-3", "date": "2024-05-01"}
            )

    async def test_guard_failure_does_not_block(self, store, make_tx, clock) -> None:
        service = TransactionService(store, guard=_BrokenGuard(), clock=clock)
        result = await service.add_transaction(make_tx())
        assert result.outcome == AddOutcome.CREATED

    async def test_insert_failure_propagates(self, make_tx, clock) -> None:
        service = TransactionService(_ReadOnlyStore(), clock=clock)
        with pytest.raises(PersistenceFailure, match="read-only"):
            await service.add_transaction(make_tx())

    async def test_installment_projected_in_background(self, service, store, tasks, make_tx) -> None:
        await service.add_transaction(
            make_tx(description="Notebook (1/3)", installment_current=1, installment_total=3)
        )
        await tasks.close()

        assert await store.count(TRANSACTIONS) == 3


class TestUpdateDelete:
    """Tests for update and delete."""

    async def test_update_validates(self, service, make_tx, company_id) -> None:
        created = (await service.add_transaction(make_tx())).transaction
        with pytest.raises(ValidationError):
            await service.update_transaction(company_id, created.id, {"amount": "abc"})

    async def test_update_ignores_identity_fields(self, service, make_tx, company_id) -> None:
        created = (await service.add_transaction(make_tx())).transaction
        updated = await service.update_transaction(
            company_id, created.id, {"company_id": "other", "amount": "250.00"}
        )
        assert updated.company_id == company_id
        assert updated.amount == Decimal("250.00")

    async def test_update_recurring_reprojects(self, service, store, tasks, make_tx, company_id) -> None:
        created = (await service.add_transaction(make_tx())).transaction
        await service.update_transaction(company_id, created.id, {"is_recurring": True})
        await tasks.close()

        assert await store.count(TRANSACTIONS, Filter().eq("date", date(2024, 6, 10))) == 1

    async def test_description_edit_does_not_reproject(
        self, service, store, tasks, make_tx, company_id
    ) -> None:
        created = (await service.add_transaction(make_tx(is_recurring=True))).transaction
        await tasks.join()
        assert await store.count(TRANSACTIONS) == 2

        await service.update_transaction(company_id, created.id, {"description": "Aluguel Sala"})
        await tasks.close()

        assert await store.count(TRANSACTIONS) == 2
        assert await store.count(TRANSACTIONS, Filter().eq("description", "Aluguel Sala")) == 1

    async def test_delete(self, service, store, make_tx, company_id) -> None:
        created = (await service.add_transaction(make_tx())).transaction
        await service.delete_transaction(company_id, created.id)
        assert await store.count(TRANSACTIONS) == 0

    async def test_delete_other_company(self, service, make_tx) -> None:
        created = (await service.add_transaction(make_tx())).transaction
        with pytest.raises(EntityNotFoundError):
            await service.delete_transaction("intruder", created.id)


class TestListTransactions:
    """Tests for list_transactions."""

    async def test_overdue_is_derived_not_stored(self, service, store, make_tx, company_id) -> None:
        await service.add_transaction(make_tx(date=date(2024, 5, 1)))

        listed = await service.list_transactions(company_id, today=date(2024, 5, 15))

        assert listed[0].status == TransactionStatus.OVERDUE
        rows = await store.query(TRANSACTIONS)
        assert rows[0]["status"] == "PENDING"

    async def test_not_overdue_before_due_date(self, service, make_tx, company_id) -> None:
        await service.add_transaction(make_tx(date=date(2024, 5, 1), due_date=date(2024, 5, 20)))
        listed = await service.list_transactions(company_id)
        assert listed[0].status == TransactionStatus.PENDING

    async def test_user_sees_own_records(self, service, make_tx, company_id) -> None:
        await service.add_transaction(make_tx(user_id="u1", description="Mine"))
        await service.add_transaction(make_tx(user_id="u2", description="Theirs"))

        mine = await service.list_transactions(company_id, user_id="u1")
        everything = await service.list_transactions(company_id, user_id="u1", role=UserRole.ADMIN)

        assert [t.description for t in mine] == ["Mine"]
        assert len(everything) == 2

    async def test_newest_first(self, service, make_tx, company_id) -> None:
        await service.add_transaction(make_tx(description="A", date=date(2024, 4, 1)))
        await service.add_transaction(make_tx(description="B", date=date(2024, 5, 1)))
        listed = await service.list_transactions(company_id)
        assert [t.description for t in listed] == ["B", "A"]


class TestInstallmentPlan:
    """Tests for create_installment_plan."""

    async def test_splits_total_with_residue_on_last(self, service, company_id) -> None:
        plan = await service.create_installment_plan(
            company_id, "Empréstimo Banco", "1000", 3, date(2024, 1, 31)
        )

        assert [t.amount for t in plan] == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]
        assert sum(t.amount for t in plan) == Decimal("1000")
        assert [t.date for t in plan] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
        assert plan[1].description == "Empréstimo Banco (2/3)"
        assert all(t.status == TransactionStatus.PENDING for t in plan)
        assert plan[0].category == "Cartão de Crédito"

    @pytest.mark.parametrize(
        "description,total,count",
        [("", "100", 2), ("Fatura", "0", 2), ("Fatura", "100", 0)],
    )
    async def test_rejects_invalid_plans(self, service, company_id, description, total, count) -> None:
        with pytest.raises(ValidationError):
            await service.create_installment_plan(company_id, description, total, count, date(2024, 1, 1))


class TestStartSync:
    """Tests for start_sync."""

    async def test_runs_in_background(self, service, store, tasks, make_tx, company_id) -> None:
        await store.insert_one(
            TRANSACTIONS,
            make_tx(description="Notebook (1/3)", installment_current=1, installment_total=3).to_record(),
        )

        service.start_sync(company_id)
        await tasks.close()

        assert await store.count(TRANSACTIONS) == 3
        assert tasks.completed == 1


class TestListCategories:
    """Tests for TransactionService.list_categories."""

    async def test_company_scoped_and_sorted(self, service, store, company_id) -> None:
        await store.insert(
            CATEGORIES,
            [
                Category("cat-2", company_id, "Moradia", "#0ea5e9", "home").to_record(),
                Category("cat-1", company_id, "Impostos", "#ef4444", "landmark").to_record(),
                Category("cat-3", "other", "Vendas").to_record(),
            ],
        )

        categories = await service.list_categories(company_id)

        assert [c.name for c in categories] == ["Impostos", "Moradia"]
        assert categories[1] == Category("cat-2", company_id, "Moradia", "#0ea5e9", "home")

    async def test_no_categories(self, service, company_id) -> None:
        assert await service.list_categories(company_id) == []
