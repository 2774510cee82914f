"""
Storage Services Package

Provides the abstract snapshot source and an in-memory implementation.
"""

from agency_ledger.services.storage.interface import (
    ConnectionError,
    LedgerSnapshotSource,
    NotFoundError,
    StorageError,
)
from agency_ledger.services.storage.memory import InMemorySnapshotSource

__all__ = [
    # Interface
    "LedgerSnapshotSource",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemorySnapshotSource",
]
