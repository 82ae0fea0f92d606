"""Reconciliation services: duplicate guard, projection, sync and settlement."""

from finanai.services.duplicates import DuplicateGuard, EntryKey, InstallmentKey, RecurrenceKey
from finanai.services.projection import ProjectionEngine, ProjectionResult
from finanai.services.settlement import SettlementResult, SettlementService
from finanai.services.sync import ReconciliationSync, SyncReport
from finanai.services.tasks import BackgroundTasks
from finanai.services.transactions import AddResult, TransactionService

__all__ = [
    "AddResult",
    "BackgroundTasks",
    "DuplicateGuard",
    "EntryKey",
    "InstallmentKey",
    "ProjectionEngine",
    "ProjectionResult",
    "ReconciliationSync",
    "RecurrenceKey",
    "SettlementResult",
    "SettlementService",
    "SyncReport",
    "TransactionService",
]
