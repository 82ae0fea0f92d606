"""Tests for dashboard totals and display status."""

from datetime import date
from decimal import Decimal

from finanai.models.enums import CostType, TransactionScope, TransactionStatus, TransactionType
from finanai.views.status import display_status, with_display_status
from finanai.views.summary import financial_summary

INCOME = TransactionType.INCOME


class TestFinancialSummary:
    """Tests for financial_summary."""

    def test_rules(self, make_tx) -> None:
        items = [
            make_tx(type=INCOME, amount=Decimal("1000"), status=TransactionStatus.PAID),
            make_tx(
                type=INCOME,
                amount=Decimal("200"),
                status=TransactionStatus.PAID,
                scope=TransactionScope.PERSONAL,
            ),
            make_tx(type=INCOME, amount=Decimal("300")),
            make_tx(type=INCOME, amount=Decimal("150"), status=TransactionStatus.OVERDUE),
            make_tx(amount=Decimal("400"), cost_type=CostType.FIXED, status=TransactionStatus.PAID),
            make_tx(amount=Decimal("100"), scope=TransactionScope.PERSONAL),
        ]
        summary = financial_summary(items)

        assert summary.total_income == Decimal("1200")
        assert summary.business_income == Decimal("1000")
        assert summary.personal_income == Decimal("200")
        assert summary.pending_receivables == Decimal("300")
        assert summary.overdue_receivables == Decimal("150")
        assert summary.total_expenses == Decimal("500")
        assert summary.fixed_expenses == Decimal("400")
        assert summary.variable_expenses == Decimal("100")
        assert summary.business_expenses == Decimal("400")
        assert summary.personal_expenses == Decimal("100")
        assert summary.balance == Decimal("700")

    def test_month_filter_uses_booking_date(self, make_tx) -> None:
        items = [
            make_tx(amount=Decimal("10"), date=date(2024, 5, 31), due_date=date(2024, 6, 10)),
            make_tx(amount=Decimal("20"), date=date(2024, 6, 1)),
        ]
        assert financial_summary(items, "2024-05").total_expenses == Decimal("10")

    def test_empty(self) -> None:
        assert financial_summary([]).balance == Decimal("0")


class TestDisplayStatus:
    """Tests for read-time overdue derivation."""

    def test_pending_past_due_is_overdue(self, make_tx) -> None:
        tx = make_tx(date=date(2024, 5, 1))
        assert display_status(tx, date(2024, 5, 2)) == TransactionStatus.OVERDUE
        assert tx.status == TransactionStatus.PENDING

    def test_due_today_is_pending(self, make_tx) -> None:
        tx = make_tx(date=date(2024, 5, 1))
        assert display_status(tx, date(2024, 5, 1)) == TransactionStatus.PENDING

    def test_paid_stays_paid(self, make_tx) -> None:
        tx = make_tx(date=date(2024, 1, 1), status=TransactionStatus.PAID)
        assert display_status(tx, date(2024, 5, 1)) == TransactionStatus.PAID

    def test_with_display_status_copies(self, make_tx) -> None:
        original = make_tx(date=date(2024, 5, 1))
        [shown] = with_display_status([original], date(2024, 6, 1))
        assert shown.status == TransactionStatus.OVERDUE
        assert original.status == TransactionStatus.PENDING
