"""PostgreSQL record store on top of psycopg 3 async connections."""

import logging
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from finanai.exceptions import EntityNotFoundError, PersistenceFailure
from finanai.store.base import Condition, Filter, RecordStore

logger = logging.getLogger(__name__)

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    company_id TEXT NOT NULL,
    name TEXT NOT NULL,
    color TEXT NOT NULL DEFAULT '',
    icon TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_categories_company
    ON categories (company_id);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    company_id TEXT NOT NULL,
    user_id TEXT,
    category_id TEXT,
    category TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL,
    amount NUMERIC(15, 2) NOT NULL CHECK (amount >= 0),
    type TEXT NOT NULL,
    status TEXT NOT NULL,
    cost_type TEXT,
    scope TEXT,
    date DATE NOT NULL,
    due_date DATE,
    is_recurring BOOLEAN NOT NULL DEFAULT FALSE,
    installment_current INTEGER,
    installment_total INTEGER,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_transactions_company_date
    ON transactions (company_id, date);
"""

_SQL_OPERATORS = {
    "eq": "=",
    "neq": "<>",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "ilike": "ILIKE",
}


def compile_condition(condition: Condition) -> tuple[sql.Composable, list[Any]]:
    """Compile one condition into a SQL fragment and its parameters."""
    column = sql.Identifier(condition.field)
    if condition.op == "in":
        return sql.SQL("{} = ANY(%s)").format(column), [list(condition.value)]
    if condition.value is None and condition.op in ("eq", "neq"):
        keyword = "IS NULL" if condition.op == "eq" else "IS NOT NULL"
        return sql.SQL("{} " + keyword).format(column), []
    operator = _SQL_OPERATORS[condition.op]
    return sql.SQL("{} " + operator + " %s").format(column), [condition.value]


def compile_filter(filter: Filter | None) -> tuple[sql.Composable, list[Any]]:
    """Compile a filter into a ``WHERE`` clause (empty when no filter)."""
    if filter is None or (not filter.conditions and not filter.groups):
        return sql.SQL(""), []

    clauses: list[sql.Composable] = []
    params: list[Any] = []
    for condition in filter.conditions:
        clause, values = compile_condition(condition)
        clauses.append(clause)
        params.extend(values)
    for group in filter.groups:
        parts = []
        for condition in group:
            clause, values = compile_condition(condition)
            parts.append(clause)
            params.extend(values)
        clauses.append(sql.SQL("({})").format(sql.SQL(" OR ").join(parts)))

    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(clauses), params


class PostgresRecordStore(RecordStore):
    """Record store backed by a psycopg ``AsyncConnection``."""

    def __init__(self, conn: Any) -> None:
        """Initialize the store.

        Parameters
        ----------
        conn : psycopg.AsyncConnection
            Open connection configured with ``dict_row`` and autocommit.
        """
        self.conn = conn

    @classmethod
    async def connect(cls, conninfo: str) -> "PostgresRecordStore":
        """Open a connection and wrap it in a store."""
        try:
            conn = await psycopg.AsyncConnection.connect(
                conninfo, autocommit=True, row_factory=dict_row
            )
        except psycopg.Error as e:
            raise PersistenceFailure(f"Could not connect to PostgreSQL: {e}") from e
        logger.info("Connected to PostgreSQL")
        return cls(conn)

    async def create_schema(self) -> None:
        """Create the categories and transactions tables if missing."""
        await self._execute(sql.SQL(SCHEMA_DDL), [], fetch=False)

    async def _execute(
        self, query: sql.Composable, params: list[Any], fetch: bool = True
    ) -> list[dict[str, Any]]:
        try:
            async with self.conn.cursor() as cur:
                # No params keeps the simple protocol, which allows the multi-statement DDL
                await cur.execute(query, params or None)
                if not fetch:
                    return []
                return list(await cur.fetchall())
        except psycopg.Error as e:
            raise PersistenceFailure(f"Database operation failed: {e}") from e

    async def query(
        self,
        table: str,
        filter: Filter | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        where, params = compile_filter(filter)
        query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table)) + where
        if order_by:
            direction = sql.SQL(" DESC") if descending else sql.SQL(" ASC")
            query += sql.SQL(" ORDER BY {}").format(sql.Identifier(order_by)) + direction
        if limit is not None:
            query += sql.SQL(" LIMIT %s")
            params.append(limit)
        return await self._execute(query, params)

    async def insert(self, table: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not records:
            return []

        columns: list[str] = []
        for record in records:
            for key in record:
                if key not in columns:
                    columns.append(key)

        rows = []
        params: list[Any] = []
        for record in records:
            values = []
            for column in columns:
                if column in record:
                    values.append(sql.Placeholder())
                    params.append(record[column])
                else:
                    values.append(sql.SQL("DEFAULT"))
            rows.append(sql.SQL("({})").format(sql.SQL(", ").join(values)))

        query = sql.SQL("INSERT INTO {} ({}) VALUES {} RETURNING *").format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(rows),
        )
        return await self._execute(query, params)

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        assignments, params = self._assignments(fields)
        query = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
            sql.Identifier(table), assignments
        )
        rows = await self._execute(query, params + [record_id])
        if not rows:
            raise EntityNotFoundError(f"{table} record {record_id} not found")
        return rows[0]

    async def update_many(
        self, table: str, ids: list[str], fields: dict[str, Any]
    ) -> list[dict[str, Any]]:
        if not ids:
            return []
        assignments, params = self._assignments(fields)
        query = sql.SQL("UPDATE {} SET {} WHERE id = ANY(%s) RETURNING *").format(
            sql.Identifier(table), assignments
        )
        return await self._execute(query, params + [list(ids)])

    async def delete(self, table: str, record_id: str) -> None:
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(sql.Identifier(table))
        await self._execute(query, [record_id], fetch=False)

    async def count(self, table: str, filter: Filter | None = None) -> int:
        where, params = compile_filter(filter)
        query = sql.SQL("SELECT count(*) AS n FROM {}").format(sql.Identifier(table)) + where
        rows = await self._execute(query, params)
        return int(rows[0]["n"]) if rows else 0

    async def close(self) -> None:
        await self.conn.close()

    def _assignments(self, fields: dict[str, Any]) -> tuple[sql.Composable, list[Any]]:
        parts = [sql.SQL("{} = %s").format(sql.Identifier(k)) for k in fields]
        return sql.SQL(", ").join(parts), list(fields.values())
