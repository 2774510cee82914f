"""
Abstract Snapshot Source Interface

DESIGN DECISION: The engine never talks to a database. It receives an
immutable snapshot of all collections through this interface. This allows us to:
1. Plug in whatever sync layer holds the records (cloud, local, files)
2. Use in-memory sources for testing
3. Keep the engine free of I/O and ambient state

Records are appended or removed at the source of truth; this package only
hands out read-only copies.
"""

from abc import ABC, abstractmethod

from agency_ledger.models.snapshot import LedgerSnapshot


class LedgerSnapshotSource(ABC):
    """
    Abstract interface for obtaining ledger snapshots.

    Any source implementation must return a fresh snapshot whose version
    changes whenever any collection changed.
    """

    @abstractmethod
    async def load_snapshot(self) -> LedgerSnapshot:
        """
        Load the current snapshot of all collections.

        Returns:
            An immutable LedgerSnapshot

        Raises:
            ConnectionError: If the backing store cannot be reached
            StorageError: For any other failure
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in the snapshot."""
    pass


class ConnectionError(StorageError):
    """Could not reach the backing store."""
    pass
