"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from finanai.models.enums import TransactionStatus, TransactionType
from finanai.models.transaction import Transaction
from finanai.store import InMemoryRecordStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def company_id() -> str:
    """Sample company ID."""
    return "comp-test-001"


@pytest.fixture
def today() -> date:
    """Fixed reference date."""
    return date(2024, 5, 15)


@pytest.fixture
def clock(today: date) -> Callable[[], date]:
    """Clock pinned to ``today``."""
    return lambda: today


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Fresh in-memory store for each test."""
    return InMemoryRecordStore()


@pytest.fixture
def make_tx(company_id: str) -> Callable[..., Transaction]:
    """Factory for transactions with sensible defaults."""

    def _make(**overrides: Any) -> Transaction:
        values: dict[str, Any] = {
            "company_id": company_id,
            "description": "Aluguel",
            "amount": Decimal("100.00"),
            "type": TransactionType.EXPENSE,
            "status": TransactionStatus.PENDING,
            "date": date(2024, 5, 10),
        }
        values.update(overrides)
        return Transaction(**values)

    return _make
