"""Enumeration types for finance entities."""

from enum import Enum


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"


class TransactionScope(str, Enum):
    PERSONAL = "PERSONAL"
    BUSINESS = "BUSINESS"


class CostType(str, Enum):
    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class UserPlan(str, Enum):
    FREE = "FREE"
    START = "START"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class ReceivableMode(str, Enum):
    RECEIVABLES = "RECEIVABLES"
    PAYABLES = "PAYABLES"


class NotificationLevel(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"


class AddOutcome(str, Enum):
    CREATED = "CREATED"
    DUPLICATE_SKIPPED = "DUPLICATE_SKIPPED"
