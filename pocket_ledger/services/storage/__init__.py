"""
Storage Services Package

Provides the abstract entity store interface and its SQLite implementation.
"""

from pocket_ledger.services.storage.interface import (
    ConnectionError,
    EntityStoreInterface,
    NotFoundError,
    StorageError,
)
from pocket_ledger.services.storage.sqlite_store import (
    SQLiteClient,
    SQLiteEntityStore,
)

__all__ = [
    # Interface
    "EntityStoreInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # SQLite implementation
    "SQLiteClient",
    "SQLiteEntityStore",
]
