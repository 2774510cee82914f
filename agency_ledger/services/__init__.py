"""Services package."""

from agency_ledger.services.storage import (
    ConnectionError,
    InMemorySnapshotSource,
    LedgerSnapshotSource,
    NotFoundError,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "InMemorySnapshotSource",
    "LedgerSnapshotSource",
    "NotFoundError",
    "StorageError",
]
