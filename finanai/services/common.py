"""Helpers shared by the foreground services."""

from typing import Awaitable, TypeVar

from finanai.exceptions import FinanAIError, PersistenceFailure

T = TypeVar("T")


async def persist(operation: Awaitable[T], action: str) -> T:
    """Await a store call, turning driver errors into ``PersistenceFailure``.

    Errors already in the finanai hierarchy pass through unchanged.
    """
    try:
        return await operation
    except FinanAIError:
        raise
    except Exception as e:
        raise PersistenceFailure(f"{action} failed: {e}") from e
