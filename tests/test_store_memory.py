"""Tests for the in-memory record store and filters."""

from datetime import date

import pytest

from finanai.exceptions import EntityNotFoundError
from finanai.store import TRANSACTIONS, Condition, Filter, InMemoryRecordStore, escape_like
from finanai.store.memory import like_to_regex, matches


class TestFilter:
    """Tests for Filter construction and matching."""

    def test_rejects_unknown_operator(self) -> None:
        with pytest.raises(ValueError):
            Condition("amount", "between", 1)

    def test_chaining(self) -> None:
        flt = Filter().eq("a", 1).gte("b", 2)
        assert [c.op for c in flt.conditions] == ["eq", "gte"]

    def test_any_of_group(self) -> None:
        flt = Filter().any_of(Condition("is_recurring", "eq", True), Condition("n", "gt", 0))
        assert matches({"is_recurring": True, "n": None}, flt)
        assert matches({"is_recurring": False, "n": 3}, flt)
        assert not matches({"is_recurring": False, "n": None}, flt)

    def test_comparison_with_none_is_false(self) -> None:
        assert not matches({"date": None}, Filter().gte("date", date(2024, 1, 1)))

    def test_in(self) -> None:
        assert matches({"id": "b"}, Filter().in_("id", ["a", "b"]))
        assert not matches({"id": "c"}, Filter().in_("id", ["a", "b"]))


class TestLike:
    """Tests for LIKE pattern translation."""

    def test_prefix_case_insensitive(self) -> None:
        assert like_to_regex("note%").fullmatch("Notebook (2/10)")

    def test_escaped_wildcards_are_literal(self) -> None:
        pattern = escape_like("50%_off") + "%"
        assert like_to_regex(pattern).fullmatch("50%_off (1/2)")
        assert not like_to_regex(pattern).fullmatch("50 percent off")


class TestInMemoryRecordStore:
    """Tests for InMemoryRecordStore."""

    async def test_insert_assigns_identity(self, store: InMemoryRecordStore) -> None:
        rows = await store.insert(TRANSACTIONS, [{"company_id": "c1"}, {"company_id": "c1"}])
        assert len({r["id"] for r in rows}) == 2
        assert all(r["created_at"] is not None for r in rows)

    async def test_rows_are_copies(self, store: InMemoryRecordStore) -> None:
        row = await store.insert_one(TRANSACTIONS, {"company_id": "c1", "tags": ["a"]})
        row["tags"].append("b")
        stored = await store.query(TRANSACTIONS, Filter().eq("id", row["id"]))
        assert stored[0]["tags"] == ["a"]

    async def test_query_order_and_limit(self, store: InMemoryRecordStore) -> None:
        await store.insert(
            TRANSACTIONS,
            [
                {"company_id": "c1", "date": date(2024, 1, 1)},
                {"company_id": "c1", "date": date(2024, 3, 1)},
                {"company_id": "c1", "date": None},
                {"company_id": "c2", "date": date(2024, 2, 1)},
            ],
        )
        rows = await store.query(TRANSACTIONS, Filter().eq("company_id", "c1"), order_by="date", descending=True)
        assert [r["date"] for r in rows] == [date(2024, 3, 1), date(2024, 1, 1), None]

        limited = await store.query(TRANSACTIONS, order_by="date", limit=1)
        assert limited[0]["date"] == date(2024, 1, 1)

    async def test_update(self, store: InMemoryRecordStore) -> None:
        row = await store.insert_one(TRANSACTIONS, {"company_id": "c1", "status": "PENDING"})
        updated = await store.update(TRANSACTIONS, row["id"], {"status": "PAID"})
        assert updated["status"] == "PAID"

    async def test_update_missing(self, store: InMemoryRecordStore) -> None:
        with pytest.raises(EntityNotFoundError):
            await store.update(TRANSACTIONS, "nope", {"status": "PAID"})

    async def test_update_many_skips_unknown(self, store: InMemoryRecordStore) -> None:
        rows = await store.insert(TRANSACTIONS, [{"status": "PENDING"}, {"status": "PENDING"}])
        ids = [r["id"] for r in rows] + ["ghost"]
        updated = await store.update_many(TRANSACTIONS, ids, {"status": "PAID"})
        assert len(updated) == 2
        assert await store.count(TRANSACTIONS, Filter().eq("status", "PAID")) == 2

    async def test_delete_and_count(self, store: InMemoryRecordStore) -> None:
        row = await store.insert_one(TRANSACTIONS, {"company_id": "c1"})
        assert await store.count(TRANSACTIONS) == 1
        await store.delete(TRANSACTIONS, row["id"])
        assert await store.count(TRANSACTIONS) == 0
        assert store.summary() == {TRANSACTIONS: 0}
