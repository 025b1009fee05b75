"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the remote
transaction store. The HTTP implementation talks to the transactions API;
the in-memory one is used for tests and demos.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    CommitError,
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionSplitStoreInterface,
)
from src.services.storage.http_store import HttpTransactionSplitStore
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTransactionSplitStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionSplitStoreInterface",
    # Exceptions
    "CommitError",
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "HttpTransactionSplitStore",
    "InMemoryAuditStorage",
    "InMemoryTransactionSplitStore",
]
