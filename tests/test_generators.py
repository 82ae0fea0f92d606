"""Tests for the sample ledger generator."""

from datetime import date

from finanai.generators import LedgerGenerator
from finanai.models.enums import TransactionStatus
from finanai.models.transaction import FixedInstallments, OpenEnded


class TestLedgerGenerator:
    """Tests for LedgerGenerator."""

    def test_deterministic_with_seed(self, seed: int, company_id: str, today: date) -> None:
        first = LedgerGenerator(company_id, seed=seed).generate_ledger(today)
        second = LedgerGenerator(company_id, seed=seed).generate_ledger(today)

        assert [(t.description, t.amount, t.date) for t in first] == [
            (t.description, t.amount, t.date) for t in second
        ]

    def test_ledger_composition(self, seed: int, company_id: str, today: date) -> None:
        ledger = LedgerGenerator(company_id, seed=seed).generate_ledger(
            today, entries=10, installments=2, recurring=3
        )

        installments = [t for t in ledger if isinstance(t.recurrence, FixedInstallments)]
        recurring = [t for t in ledger if isinstance(t.recurrence, OpenEnded)]

        assert len(ledger) == 15
        assert len(installments) == 2
        assert all(t.installment_current == 1 for t in installments)
        assert len({t.base_description for t in installments}) == 2
        assert len(recurring) == 3
        assert all(t.company_id == company_id for t in ledger)
        assert [t.date for t in ledger] == sorted(t.date for t in ledger)

    def test_one_off_status_follows_date(self, seed: int, company_id: str, today: date) -> None:
        generator = LedgerGenerator(company_id, seed=seed)

        for _ in range(30):
            tx = generator.generate_entry(today)
            expected = TransactionStatus.PAID if tx.date <= today else TransactionStatus.PENDING
            assert tx.status == expected
            assert tx.amount > 0

    def test_recurring_falls_in_current_month(
        self, seed: int, company_id: str, today: date
    ) -> None:
        tx = LedgerGenerator(company_id, seed=seed).generate_recurring(
            today, "Aluguel", "Moradia", LedgerGenerator.RECURRING_BILLS[0][2]
        )

        assert tx.is_recurring
        assert (tx.date.year, tx.date.month) == (2024, 5)

    def test_generate_categories(self, seed: int, company_id: str) -> None:
        categories = LedgerGenerator(company_id, seed=seed).generate_categories()

        assert [c.name for c in categories] == [name for name, _, _ in LedgerGenerator.CATEGORIES]
        assert len({c.id for c in categories}) == len(categories)

    def test_generate_company(self, seed: int, company_id: str) -> None:
        company = LedgerGenerator(company_id, user_id="user-1", seed=seed).generate_company()

        assert company.id == company_id
        assert company.name
        assert company.owner_id == "user-1"
