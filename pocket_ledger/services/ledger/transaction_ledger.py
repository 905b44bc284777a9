"""
Transaction Ledger

Insert, delete and filtered retrieval of transactions. There is no edit
path: a wrong entry is deleted and recorded again.
"""

from datetime import date, datetime, time
from typing import Optional, Union
from uuid import UUID

import structlog

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.ledger import (
    TransactionFilter,
    TransactionType,
    TransactionView,
)
from pocket_ledger.services.storage import (
    EntityStoreInterface,
    NotFoundError,
    StorageError,
)
from pocket_ledger.validation import EntryValidator, normalize_currency
from pocket_ledger.validation.validator import AmountInput


logger = structlog.get_logger(__name__)


def _as_timestamp(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value.replace(microsecond=0)
    return datetime.combine(value, time.min)


def _clean_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    return note or None


class TransactionLedger:
    """CRUD over transaction records."""

    def __init__(
        self,
        store: EntityStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit = audit_logger or AuditLogger()

    async def insert(
        self,
        amount: AmountInput,
        currency: str,
        occurred_at: Union[date, datetime],
        tag_id: int,
        type: TransactionType,
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Record a transaction.

        The tag must exist at insert time; later deletion of the tag is fine.

        Returns:
            The new transaction id

        Raises:
            ValidationError: Non-numeric/non-positive amount, missing
                currency, unknown type or unknown tag
            StorageError: If the insert fails
        """
        currency = normalize_currency(currency)
        tag = await self._store.get_tag(tag_id)

        parsed, entry_type, result = self._validator.validate_transaction(
            amount, currency, tag_id, tag, type
        )
        if result.has_errors:
            await self._audit.log_validation_failed(
                result.operation,
                [i.model_dump() for i in result.issues],
                correlation_id,
            )
        self._validator.ensure_valid(result)
        for issue in result.issues:
            logger.warning("entry_validation_warning", field=issue.field, message=issue.message)

        try:
            tx_id = await self._store.insert_transaction(
                amount=parsed,
                currency=currency,
                occurred_at=_as_timestamp(occurred_at),
                tag_id=tag_id,
                type=entry_type,
                note=_clean_note(note),
            )
        except StorageError as e:
            await self._audit.log_storage_error(
                "insert_transaction", str(e), correlation_id=correlation_id
            )
            raise

        await self._audit.log_transaction_recorded(tx_id, str(parsed), currency, correlation_id)
        return tx_id

    async def delete(
        self,
        tx_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Delete a transaction. Deleting an unknown id is not an error."""
        try:
            await self._store.delete_transaction(tx_id)
        except NotFoundError:
            logger.debug("transaction_already_absent", tx_id=tx_id)
            return
        except StorageError as e:
            await self._audit.log_storage_error(
                "delete_transaction", str(e), correlation_id=correlation_id
            )
            raise
        await self._audit.log_transaction_deleted(tx_id, correlation_id)

    async def query(self, criteria: TransactionFilter) -> list[TransactionView]:
        """
        Transactions matching the filter, newest first.

        An empty tag id set means no tag filter.
        """
        return await self._store.select_transactions(criteria)

    async def distinct_currencies(self, date_start: date, date_end: date) -> list[str]:
        """Currency codes present in the inclusive date range, sorted."""
        return await self._store.distinct_currencies(date_start, date_end)

