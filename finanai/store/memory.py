"""In-memory record store used by tests, demos and scripts."""

import copy
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from finanai.exceptions import EntityNotFoundError
from finanai.store.base import Condition, Filter, RecordStore


@dataclass
class InMemoryRecordStore(RecordStore):
    """Dict-backed store with the same semantics as the Postgres backend."""

    tables: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(table, {})

    async def query(
        self,
        table: str,
        filter: Filter | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = [row for row in self._table(table).values() if matches(row, filter)]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:limit]
        return [copy.deepcopy(row) for row in rows]

    async def insert(self, table: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        stored = []
        rows = self._table(table)
        for record in records:
            row = copy.deepcopy(record)
            if row.get("id") is None:
                row["id"] = str(uuid.uuid4())
            if row.get("created_at") is None:
                row["created_at"] = datetime.now(timezone.utc)
            rows[row["id"]] = row
            stored.append(copy.deepcopy(row))
        return stored

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        rows = self._table(table)
        if record_id not in rows:
            raise EntityNotFoundError(f"{table} record {record_id} not found")
        rows[record_id].update(copy.deepcopy(fields))
        return copy.deepcopy(rows[record_id])

    async def update_many(
        self, table: str, ids: list[str], fields: dict[str, Any]
    ) -> list[dict[str, Any]]:
        rows = self._table(table)
        updated = []
        for record_id in ids:
            if record_id in rows:
                rows[record_id].update(copy.deepcopy(fields))
                updated.append(copy.deepcopy(rows[record_id]))
        return updated

    async def delete(self, table: str, record_id: str) -> None:
        self._table(table).pop(record_id, None)

    async def count(self, table: str, filter: Filter | None = None) -> int:
        return sum(1 for row in self._table(table).values() if matches(row, filter))

    def summary(self) -> dict[str, int]:
        """Return row counts per table."""
        return {name: len(rows) for name, rows in self.tables.items()}


def matches(row: dict[str, Any], filter: Filter | None) -> bool:
    """Evaluate ``filter`` against a row."""
    if filter is None:
        return True
    if not all(_check(row, c) for c in filter.conditions):
        return False
    return all(any(_check(row, c) for c in group) for group in filter.groups)


def like_to_regex(pattern: str) -> re.Pattern:
    """Translate a SQL LIKE pattern (backslash escapes) to a regex."""
    parts = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _check(row: dict[str, Any], condition: Condition) -> bool:
    value = row.get(condition.field)
    target = condition.value
    op = condition.op

    if op == "eq":
        return value == target
    if op == "neq":
        return value != target
    if op == "in":
        return value in target
    if op == "ilike":
        return value is not None and like_to_regex(target).fullmatch(str(value)) is not None

    if value is None or target is None:
        return False
    try:
        if op == "gt":
            return value > target
        if op == "gte":
            return value >= target
        if op == "lt":
            return value < target
        return value <= target
    except TypeError:
        return False
