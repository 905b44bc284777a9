"""Services package."""

from pocket_ledger.services.ledger import (
    RecurringExpenseRegistry,
    SettingsStore,
    TagCatalog,
    TransactionLedger,
)
from pocket_ledger.services.storage import (
    ConnectionError,
    EntityStoreInterface,
    NotFoundError,
    SQLiteClient,
    SQLiteEntityStore,
    StorageError,
)

__all__ = [
    # Ledger services
    "RecurringExpenseRegistry",
    "SettingsStore",
    "TagCatalog",
    "TransactionLedger",
    # Storage services
    "ConnectionError",
    "EntityStoreInterface",
    "NotFoundError",
    "SQLiteClient",
    "SQLiteEntityStore",
    "StorageError",
]
