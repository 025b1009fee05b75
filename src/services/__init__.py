"""Services package."""

from src.services.storage import (
    AuditStorageInterface,
    CommitError,
    ConnectionError,
    HttpTransactionSplitStore,
    InMemoryAuditStorage,
    InMemoryTransactionSplitStore,
    NotFoundError,
    StorageError,
    TransactionSplitStoreInterface,
)

__all__ = [
    "AuditStorageInterface",
    "CommitError",
    "ConnectionError",
    "HttpTransactionSplitStore",
    "InMemoryAuditStorage",
    "InMemoryTransactionSplitStore",
    "NotFoundError",
    "StorageError",
    "TransactionSplitStoreInterface",
]
