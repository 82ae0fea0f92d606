"""Domain models for finanai."""

from finanai.models.base import Event
from finanai.models.company import Category, Company
from finanai.models.enums import (
    AddOutcome,
    CostType,
    NotificationLevel,
    ReceivableMode,
    TransactionScope,
    TransactionStatus,
    TransactionType,
    UserPlan,
    UserRole,
)
from finanai.models.transaction import (
    FixedInstallments,
    NoRecurrence,
    OpenEnded,
    RecurrenceMode,
    Transaction,
)
from finanai.models.views import (
    EntityGroup,
    FinancialSummary,
    LoanGroup,
    LoanStats,
    Notification,
    PersonalWalletStats,
    ReceivableStats,
)

__all__ = [
    "AddOutcome",
    "Category",
    "Company",
    "CostType",
    "EntityGroup",
    "Event",
    "FinancialSummary",
    "FixedInstallments",
    "LoanGroup",
    "LoanStats",
    "NoRecurrence",
    "Notification",
    "NotificationLevel",
    "OpenEnded",
    "PersonalWalletStats",
    "ReceivableMode",
    "ReceivableStats",
    "RecurrenceMode",
    "Transaction",
    "TransactionScope",
    "TransactionStatus",
    "TransactionType",
    "UserPlan",
    "UserRole",
]
