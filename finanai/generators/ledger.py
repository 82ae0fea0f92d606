"""Sample ledger generator for a company."""

import random
from datetime import date, timedelta
from decimal import Decimal

from finanai.dates import month_bounds
from finanai.generators.base import BaseGenerator
from finanai.models.company import Category, Company
from finanai.models.description import installment_description
from finanai.models.enums import (
    CostType,
    TransactionScope,
    TransactionStatus,
    TransactionType,
)
from finanai.models.transaction import Transaction


class LedgerGenerator(BaseGenerator):
    """Generate realistic transactions for one company.

    Installment purchases only carry their first installment and recurring
    bills only their current month, leaving the rest to the projection
    engine.
    """

    CATEGORIES = [
        ("Vendas", "#10b981", "shopping-bag"),
        ("Serviços", "#6366f1", "briefcase"),
        ("Fornecedores", "#f59e0b", "truck"),
        ("Impostos", "#ef4444", "landmark"),
        ("Cartão de Crédito", "#8b5cf6", "credit-card"),
        ("Moradia", "#0ea5e9", "home"),
        ("Outros", "#64748b", "tag"),
    ]

    INCOME_CATEGORIES = ["Vendas", "Serviços"]
    EXPENSE_CATEGORIES = ["Fornecedores", "Impostos", "Outros"]

    PURCHASES = ["Notebook", "Celular", "Impressora", "Cadeira de Escritório", "Ar Condicionado"]
    INSTALLMENT_COUNTS = [3, 6, 10, 12]

    RECURRING_BILLS = [
        ("Aluguel", "Moradia", TransactionType.EXPENSE),
        ("Internet", "Moradia", TransactionType.EXPENSE),
        ("Energia", "Moradia", TransactionType.EXPENSE),
        ("Contador", "Serviços", TransactionType.EXPENSE),
        ("Mensalidade Cliente", "Serviços", TransactionType.INCOME),
    ]

    def __init__(
        self,
        company_id: str,
        user_id: str | None = None,
        seed: int | None = None,
    ) -> None:
        super().__init__(seed)
        self.company_id = company_id
        self.user_id = user_id

    def generate_company(self, owner_id: str | None = None) -> Company:
        return Company(
            id=self.company_id,
            name=self.fake.company(),
            cnpj=self.fake.cnpj(),
            owner_id=owner_id or self.user_id,
        )

    def generate_categories(self) -> list[Category]:
        return [
            Category(
                id=self.fake.uuid4(),
                company_id=self.company_id,
                name=name,
                color=color,
                icon=icon,
            )
            for name, color, icon in self.CATEGORIES
        ]

    def generate_entry(self, today: date) -> Transaction:
        """Generate a one-off income or expense from the last 60 days or next 30."""
        tx_type = random.choices(
            [TransactionType.INCOME, TransactionType.EXPENSE], weights=[0.4, 0.6], k=1
        )[0]
        categories = (
            self.INCOME_CATEGORIES if tx_type == TransactionType.INCOME else self.EXPENSE_CATEGORIES
        )
        booked = today + timedelta(days=random.randint(-60, 30))
        status = TransactionStatus.PAID if booked <= today else TransactionStatus.PENDING

        if tx_type == TransactionType.INCOME:
            description = f"Recebimento {self.fake.company()}"
        else:
            description = f"Pagamento {self.fake.company()}"

        return Transaction(
            company_id=self.company_id,
            user_id=self.user_id,
            description=description,
            amount=self._amount(),
            type=tx_type,
            status=status,
            date=booked,
            due_date=booked,
            category=random.choice(categories),
            cost_type=CostType.VARIABLE,
            scope=random.choices(
                [TransactionScope.BUSINESS, TransactionScope.PERSONAL], weights=[0.8, 0.2], k=1
            )[0],
        )

    def generate_installment_purchase(self, today: date) -> Transaction:
        """Generate the first installment of a card purchase."""
        total = random.choice(self.INSTALLMENT_COUNTS)
        base = random.choice(self.PURCHASES)
        booked = today - timedelta(days=random.randint(0, 25))
        return Transaction(
            company_id=self.company_id,
            user_id=self.user_id,
            description=installment_description(base, 1, total),
            amount=self._amount(low=100),
            type=TransactionType.EXPENSE,
            status=TransactionStatus.PAID,
            date=booked,
            due_date=booked,
            category="Cartão de Crédito",
            cost_type=CostType.FIXED,
            scope=TransactionScope.BUSINESS,
            installment_current=1,
            installment_total=total,
        )

    def generate_recurring(
        self,
        today: date,
        description: str,
        category: str,
        tx_type: TransactionType,
    ) -> Transaction:
        """Generate this month's occurrence of a monthly bill or income."""
        first, last = month_bounds(today)
        due = first + timedelta(days=random.randint(0, (last - first).days))
        return Transaction(
            company_id=self.company_id,
            user_id=self.user_id,
            description=description,
            amount=self._amount(low=80),
            type=tx_type,
            status=TransactionStatus.PAID if due <= today else TransactionStatus.PENDING,
            date=due,
            due_date=due,
            category=category,
            cost_type=CostType.FIXED,
            scope=TransactionScope.BUSINESS,
            is_recurring=True,
        )

    def generate_ledger(
        self,
        today: date,
        entries: int = 20,
        installments: int = 3,
        recurring: int = 3,
    ) -> list[Transaction]:
        """Generate a mixed ledger, ordered by date.

        Parameters
        ----------
        today : date
            Reference date.
        entries : int
            Number of one-off transactions.
        installments : int
            Number of installment purchases (first installment only).
        recurring : int
            Number of recurring bills, at most ``len(RECURRING_BILLS)``.

        Returns
        -------
        list[Transaction]
            Generated transactions.
        """
        ledger = [self.generate_entry(today) for _ in range(entries)]

        purchases = random.sample(self.PURCHASES, min(installments, len(self.PURCHASES)))
        for base in purchases:
            tx = self.generate_installment_purchase(today)
            ledger.append(
                tx.evolve(description=installment_description(base, 1, tx.installment_total))
            )

        bills = random.sample(self.RECURRING_BILLS, min(recurring, len(self.RECURRING_BILLS)))
        for description, category, tx_type in bills:
            ledger.append(self.generate_recurring(today, description, category, tx_type))

        ledger.sort(key=lambda t: t.date)
        return ledger

    @staticmethod
    def _amount(low: float = 10) -> Decimal:
        # Pareto keeps most values small with a long tail
        amount = min(random.paretovariate(1.5) * low, 50000)
        return Decimal(str(round(amount, 2)))
