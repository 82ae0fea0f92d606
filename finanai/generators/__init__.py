"""Sample ledger generation."""

from finanai.generators.ledger import LedgerGenerator

__all__ = ["LedgerGenerator"]
