"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the remote operations
the split editor needs. This allows us to:
1. Talk to the real transactions API over HTTP
2. Use in-memory storage for testing
3. Keep the editing session decoupled from transport details

The interface is intentionally small: fetch the split data, commit it, and
list categories for the subcategory selector.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.transaction import (
    Category,
    SplitUpdate,
    TransactionId,
    TransactionSplit,
)


class TransactionSplitStoreInterface(ABC):
    """
    Abstract interface for the remote transaction store.

    Any implementation (HTTP API, in-memory, etc.) must implement these
    methods and report failures as StorageError subclasses.
    """

    @abstractmethod
    async def fetch_split_data(
        self,
        transaction_id: TransactionId,
    ) -> TransactionSplit:
        """
        Fetch an original transaction and the splits that reference it.

        Args:
            transaction_id: Id of the original transaction

        Returns:
            The original as it is now, plus zero or more existing splits

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the fetch fails
        """
        pass

    @abstractmethod
    async def commit_splits(
        self,
        transaction_id: TransactionId,
        items: list[SplitUpdate],
    ) -> TransactionSplit:
        """
        Atomically replace the splits of a transaction.

        Items with an id update that split; items without one create a new
        split. Existing splits absent from items are deleted. The server
        recomputes the original's amount.

        Args:
            transaction_id: Id of the original transaction
            items: The complete split set

        Returns:
            The canonical original and splits after the commit

        Raises:
            CommitError: If the store rejected the commit (nothing persisted)
            StorageError: If the commit fails for any other reason
        """
        pass

    @abstractmethod
    async def fetch_categories(self) -> list[Category]:
        """
        List categories with their subcategories.

        Returns:
            All categories known to the store
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events of one editing session.

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class CommitError(StorageError):
    """The store rejected a commit. Nothing was persisted."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
