"""Persistent record stores."""

from finanai.store.base import (
    CATEGORIES,
    TRANSACTIONS,
    Condition,
    Filter,
    RecordStore,
    escape_like,
)
from finanai.store.memory import InMemoryRecordStore

__all__ = [
    "CATEGORIES",
    "TRANSACTIONS",
    "Condition",
    "Filter",
    "InMemoryRecordStore",
    "RecordStore",
    "escape_like",
]
