"""Tests for entry normalization."""

from datetime import date
from decimal import Decimal

import pytest

from finanai.exceptions import ValidationError
from finanai.intake import normalize_entry, parse_amount, parse_entry_date
from finanai.models import Category, Company
from finanai.models.enums import CostType, TransactionScope, TransactionStatus, TransactionType


@pytest.fixture
def categories(company_id: str) -> list[Category]:
    return [
        Category(id="cat-1", company_id=company_id, name="Alimentação"),
        Category(id="cat-2", company_id=company_id, name="Transporte"),
    ]


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1234.5, Decimal("1234.5")),
            (10, Decimal("10")),
            ("R$ 1.234,56", Decimal("1234.56")),
            ("1,234.56", Decimal("1234.56")),
            ("12,5", Decimal("12.5")),
            ("-45.90", Decimal("-45.90")),
            (Decimal("3.10"), Decimal("3.10")),
        ],
    )
    def test_formats(self, raw, expected) -> None:
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, True, float("nan")])
    def test_rejects_non_numeric(self, raw) -> None:
        with pytest.raises(ValidationError):
            parse_amount(raw)


class TestParseEntryDate:
    """Tests for parse_entry_date."""

    def test_iso(self) -> None:
        assert parse_entry_date("2024-03-05", date(2024, 1, 1)) == date(2024, 3, 5)

    def test_day_first(self) -> None:
        assert parse_entry_date("05/03/2024", date(2024, 1, 1)) == date(2024, 3, 5)

    @pytest.mark.parametrize("raw", [None, "", "someday", 42])
    def test_fallback(self, raw) -> None:
        assert parse_entry_date(raw, date(2024, 1, 1)) == date(2024, 1, 1)


class TestNormalizeEntry:
    """Tests for normalize_entry."""

    def test_defaults(self, company_id: str, today: date) -> None:
        tx = normalize_entry({"amount": "-80,00"}, company_id=company_id, today=today)

        assert tx.company_id == company_id
        assert tx.amount == Decimal("80.00")
        assert tx.type == TransactionType.EXPENSE
        assert tx.status == TransactionStatus.PAID
        assert tx.cost_type == CostType.VARIABLE
        assert tx.scope == TransactionScope.BUSINESS
        assert tx.description == "Transação Importada"
        assert tx.category == "Outros"
        assert tx.date == today
        assert tx.due_date == today

    def test_category_by_id(self, company_id, today, categories) -> None:
        tx = normalize_entry(
            {"amount": 10, "category_id": "cat-2", "category": "Ignorada"},
            company_id=company_id,
            today=today,
            categories=categories,
        )
        assert (tx.category_id, tx.category) == ("cat-2", "Transporte")

    def test_category_by_name(self, company_id, today, categories) -> None:
        tx = normalize_entry(
            {"amount": 10, "category": "alimentação"},
            company_id=company_id,
            today=today,
            categories=categories,
        )
        assert (tx.category_id, tx.category) == ("cat-1", "Alimentação")

    def test_unknown_category_keeps_name(self, company_id, today, categories) -> None:
        tx = normalize_entry(
            {"amount": 10, "category": "Lazer"}, company_id=company_id, today=today, categories=categories
        )
        assert (tx.category_id, tx.category) == (None, "Lazer")

    def test_explicit_fields(self, company_id, today) -> None:
        tx = normalize_entry(
            {
                "amount": "1.500,00",
                "type": "income",
                "status": "pending",
                "costType": "FIXED",
                "scope": "PERSONAL",
                "description": "Consultoria",
                "date": "2024-05-02",
                "due_date": "2024-05-30",
                "installment_current": "1",
                "installment_total": "3",
            },
            company_id=company_id,
            today=today,
        )
        assert tx.amount == Decimal("1500.00")
        assert tx.type == TransactionType.INCOME
        assert tx.status == TransactionStatus.PENDING
        assert tx.cost_type == CostType.FIXED
        assert tx.scope == TransactionScope.PERSONAL
        assert tx.due_date == date(2024, 5, 30)
        assert tx.installment_total == 3

    def test_company_override_only_for_known_companies(self, company_id, today) -> None:
        companies = [Company(id="comp-2", name="Filial")]

        allowed = normalize_entry(
            {"amount": 1, "company_id": "comp-2"}, company_id=company_id, today=today, companies=companies
        )
        denied = normalize_entry(
            {"amount": 1, "company_id": "comp-9"}, company_id=company_id, today=today, companies=companies
        )

        assert allowed.company_id == "comp-2"
        assert denied.company_id == company_id

    def test_invalid_amount(self, company_id, today) -> None:
        with pytest.raises(ValidationError):
            normalize_entry({"amount": "muito"}, company_id=company_id, today=today)

    def test_invalid_type(self, company_id, today) -> None:
        with pytest.raises(ValidationError):
            normalize_entry({"amount": 1, "type": "TRANSFER"}, company_id=company_id, today=today)
