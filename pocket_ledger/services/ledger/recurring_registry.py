"""
Recurring Expense Registry

Stores recurring-expense definitions (rent on the 1st, a subscription on
the 15th). Definitions are only listed; nothing turns them into
transactions.
"""

from typing import Optional
from uuid import UUID

import structlog

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.ledger import RecurringExpenseView
from pocket_ledger.services.storage import (
    EntityStoreInterface,
    NotFoundError,
    StorageError,
)
from pocket_ledger.validation import EntryValidator, normalize_currency
from pocket_ledger.validation.validator import AmountInput


logger = structlog.get_logger(__name__)


class RecurringExpenseRegistry:
    """CRUD over recurring-expense definitions."""

    def __init__(
        self,
        store: EntityStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit = audit_logger or AuditLogger()

    async def list_all(self) -> list[RecurringExpenseView]:
        """Definitions ordered by day of month, then id."""
        return await self._store.list_recurring()

    async def create(
        self,
        amount: AmountInput,
        currency: str,
        day_of_month: int,
        tag_id: Optional[int],
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Add a recurring expense.

        Returns:
            The new definition id

        Raises:
            ValidationError: Day outside 1..31, bad amount, missing currency,
                or a missing or unknown tag
            StorageError: If the insert fails
        """
        currency = normalize_currency(currency)
        tag = await self._store.get_tag(tag_id) if tag_id is not None else None
        parsed, result = self._validator.validate_recurring(
            amount, currency, day_of_month, tag_id, tag
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

        if note is not None:
            note = note.strip() or None

        try:
            rec_id = await self._store.insert_recurring(
                amount=parsed,
                currency=currency,
                day_of_month=day_of_month,
                tag_id=tag_id,
                note=note,
            )
        except StorageError as e:
            await self._audit.log_storage_error(
                "create_recurring", str(e), correlation_id=correlation_id
            )
            raise

        await self._audit.log_recurring_created(
            rec_id, str(parsed), currency, day_of_month, correlation_id
        )
        return rec_id

    async def delete(
        self,
        rec_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Remove a definition. Unknown ids are ignored."""
        try:
            await self._store.delete_recurring(rec_id)
        except NotFoundError:
            logger.debug("recurring_already_absent", rec_id=rec_id)
            return
        except StorageError as e:
            await self._audit.log_storage_error(
                "delete_recurring", str(e), correlation_id=correlation_id
            )
            raise
        await self._audit.log_recurring_deleted(rec_id, correlation_id)
