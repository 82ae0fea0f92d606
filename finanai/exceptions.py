"""Custom exception hierarchy for finanai."""

from typing import Any


class FinanAIError(Exception):
    """Base exception for all finanai errors."""


class ValidationError(FinanAIError):
    """Raised when caller-supplied input violates a precondition.

    Always raised before any write reaches the store.
    """


class EntityNotFoundError(FinanAIError):
    """Raised when a referenced record does not exist for the company."""


class PersistenceFailure(FinanAIError):
    """Raised when the store rejects or cannot complete a read/write."""


class PartialCompletionFailure(PersistenceFailure):
    """Raised when a partial settlement updated the original record but
    could not create the remainder record.

    Parameters
    ----------
    message : str
        Human readable description.
    updated : Any
        The original record as persisted (already PAID).
    """

    def __init__(self, message: str, updated: Any = None) -> None:
        super().__init__(message)
        self.updated = updated


class ConfigurationError(FinanAIError):
    """Raised when configuration is invalid or missing."""


class SinkError(FinanAIError):
    """Raised when an event sink operation fails."""
