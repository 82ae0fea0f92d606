"""Record store contract shared by the in-memory and Postgres backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

TRANSACTIONS = "transactions"
CATEGORIES = "categories"

OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "ilike", "in")


@dataclass(frozen=True)
class Condition:
    """Single ``field <op> value`` predicate."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}")


@dataclass
class Filter:
    """Conjunction of conditions plus optional OR groups.

    Every ``any_of`` call adds one group; a row matches when all plain
    conditions hold and at least one condition of every group holds.

    Examples
    --------
    >>> Filter().eq("company_id", "c1").any_of(
    ...     Condition("is_recurring", "eq", True),
    ...     Condition("installment_total", "gt", 0),
    ... )
    """

    conditions: list[Condition] = field(default_factory=list)
    groups: list[list[Condition]] = field(default_factory=list)

    def where(self, field_name: str, op: str, value: Any) -> "Filter":
        self.conditions.append(Condition(field_name, op, value))
        return self

    def eq(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "eq", value)

    def neq(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "neq", value)

    def gt(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "gt", value)

    def gte(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "gte", value)

    def lt(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "lt", value)

    def lte(self, field_name: str, value: Any) -> "Filter":
        return self.where(field_name, "lte", value)

    def ilike(self, field_name: str, pattern: str) -> "Filter":
        return self.where(field_name, "ilike", pattern)

    def in_(self, field_name: str, values: list[Any]) -> "Filter":
        return self.where(field_name, "in", list(values))

    def any_of(self, *conditions: Condition) -> "Filter":
        self.groups.append(list(conditions))
        return self


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class RecordStore(ABC):
    """Asynchronous persistent record store.

    Rows are plain dicts. Every method may raise ``PersistenceFailure``;
    ``update`` raises ``EntityNotFoundError`` when the id is unknown.
    """

    @abstractmethod
    async def query(
        self,
        table: str,
        filter: Filter | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching ``filter``."""

    @abstractmethod
    async def insert(self, table: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows in one call and return them as stored."""

    async def insert_one(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a single row and return it as stored."""
        rows = await self.insert(table, [record])
        return rows[0]

    @abstractmethod
    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply ``fields`` to one row and return it."""

    @abstractmethod
    async def update_many(
        self, table: str, ids: list[str], fields: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Apply ``fields`` to every row in ``ids`` in one call."""

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        """Delete one row."""

    @abstractmethod
    async def count(self, table: str, filter: Filter | None = None) -> int:
        """Count rows matching ``filter``."""

    async def close(self) -> None:
        """Release backend resources."""
