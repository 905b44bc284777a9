"""
Abstract Storage Interface

The ledger core talks to its relational store only through this interface.
The store owns all persisted state (tags, transactions, recurring expenses,
settings); the core issues declarative requests and gets plain pydantic
records back.

The interface is intentionally small - we're not building an ORM.
Just the operations the ledger components need.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pocket_ledger.models.ledger import (
    RecurringExpenseView,
    Tag,
    TransactionFilter,
    TransactionType,
    TransactionView,
)


class EntityStoreInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Every method is a coroutine; callers may be suspended at each store
    call. Each mutating call is its own unit of work - nothing spans
    two calls atomically.
    """

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @abstractmethod
    async def initialize(self, default_currency: str) -> None:
        """
        Create the schema and seed first-run data.

        Built-in tags are inserted only when the tags table is empty;
        the default-currency setting only when absent.

        Raises:
            ConnectionError: If the backend cannot be opened
            StorageError: If schema creation fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the backend connection."""
        pass

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    @abstractmethod
    async def insert_tag(
        self,
        name: str,
        type: TransactionType,
        icon: str,
        color: str,
        is_custom: bool,
    ) -> Tag:
        """
        Insert a tag row.

        Returns:
            The stored tag, including its new id
        """
        pass

    @abstractmethod
    async def get_tag(self, tag_id: int) -> Optional[Tag]:
        """
        Retrieve a tag by id.

        Returns:
            The tag if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_tags(
        self,
        type: Optional[TransactionType] = None,
    ) -> list[Tag]:
        """
        List tags ordered by (type, id).

        Args:
            type: Restrict to one transaction type
        """
        pass

    @abstractmethod
    async def count_tags(self) -> int:
        """Number of tag rows."""
        pass

    @abstractmethod
    async def delete_tag(self, tag_id: int) -> None:
        """
        Delete a tag row. Referencing transactions are left untouched.

        Raises:
            NotFoundError: If no such tag exists
        """
        pass

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def insert_transaction(
        self,
        amount: Decimal,
        currency: str,
        occurred_at: datetime,
        tag_id: Optional[int],
        type: TransactionType,
        note: Optional[str],
    ) -> int:
        """
        Insert a transaction row.

        Returns:
            The new transaction id

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, tx_id: int) -> None:
        """
        Delete a transaction by id.

        Raises:
            NotFoundError: If no such transaction exists
        """
        pass

    @abstractmethod
    async def select_transactions(
        self,
        criteria: TransactionFilter,
    ) -> list[TransactionView]:
        """
        Select transactions matching a filter, joined with their tags.

        Dates compare on the calendar day, both bounds inclusive. An empty
        tag id set applies no tag predicate at all.

        Returns:
            Matching transactions, newest first
        """
        pass

    @abstractmethod
    async def distinct_currencies(
        self,
        date_start: date,
        date_end: date,
    ) -> list[str]:
        """
        Currency codes used by transactions dated within the inclusive range.

        Returns:
            Sorted list of distinct codes
        """
        pass

    # -------------------------------------------------------------------------
    # Recurring expenses
    # -------------------------------------------------------------------------

    @abstractmethod
    async def insert_recurring(
        self,
        amount: Decimal,
        currency: str,
        day_of_month: int,
        tag_id: Optional[int],
        note: Optional[str],
    ) -> int:
        """
        Insert a recurring-expense definition.

        Returns:
            The new definition id
        """
        pass

    @abstractmethod
    async def delete_recurring(self, rec_id: int) -> None:
        """
        Delete a recurring-expense definition.

        Raises:
            NotFoundError: If no such definition exists
        """
        pass

    @abstractmethod
    async def list_recurring(self) -> list[RecurringExpenseView]:
        """List definitions joined with their tags, by day of month then id."""
        pass

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]:
        """
        Read a setting value.

        Returns:
            The value if the key exists, None otherwise
        """
        pass

    @abstractmethod
    async def upsert_setting(self, key: str, value: str) -> None:
        """Insert or replace a setting on its unique key."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
