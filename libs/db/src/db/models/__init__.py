"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger models written by ``bill_import``.
"""

from .ledger import Base, LedgerCategory, LedgerTransaction

__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerTransaction",
]
