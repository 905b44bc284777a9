"""
Main Orchestrator for Pocket Ledger

This module ties the components together and defines the end-to-end
flows used by a presentation layer:
1. Entry creation (resolve default currency → validate → insert)
2. Reporting refresh (window → currencies → list → statistics)
3. Management (tags, recurring expenses, preferences, deletions)

The orchestrator enforces the boundaries:
- Writes either succeed or raise; nothing is retried
- Reads never raise storage failures at this level; they come back as a
  degraded report instead
- Every step of a flow shares one correlation id in the audit log

Callers re-run ReportingFlow.refresh after any mutation; no component
pushes change notifications.
"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

from pocket_ledger.audit import AuditLogger, create_correlation_id
from pocket_ledger.config import get_settings
from pocket_ledger.models.ledger import (
    LedgerReport,
    NavigationDirection,
    RecurringExpenseView,
    ReportRequest,
    Tag,
    TransactionType,
)
from pocket_ledger.queries import DateWindowResolver, ReportExecutor
from pocket_ledger.services.ledger import (
    RecurringExpenseRegistry,
    SettingsStore,
    TagCatalog,
    TransactionLedger,
)
from pocket_ledger.services.storage import (
    EntityStoreInterface,
    SQLiteClient,
    SQLiteEntityStore,
    StorageError,
)
from pocket_ledger.validation.validator import AmountInput


class EntryCreationFlow:
    """
    Orchestrates recording a single income or expense.

    Flow:
    1. Offer the tags that match the chosen entry type
    2. Resolve the currency (explicit, else the stored default)
    3. Validate and insert through the ledger
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        tags: TagCatalog,
        settings_store: SettingsStore,
        fallback_currency: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._tags = tags
        self._settings = settings_store
        self._fallback_currency = fallback_currency
        self._audit_logger = audit_logger or AuditLogger()

    async def available_tags(self, type: TransactionType) -> list[Tag]:
        """Tags offered by the entry form for the given type."""
        return await self._tags.list_by_type(type)

    async def default_currency(self) -> str:
        return await self._settings.get_default_currency(self._fallback_currency)

    async def record(
        self,
        amount: AmountInput,
        occurred_at: Union[date, datetime],
        tag_id: int,
        type: TransactionType,
        note: Optional[str] = None,
        currency: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Record a transaction.

        The stored default currency is read only when no currency is given.

        Returns:
            The new transaction id

        Raises:
            ValidationError: If the entry is invalid (nothing is written)
            StorageError: If reading the default or the insert fails
        """
        correlation_id = correlation_id or create_correlation_id()

        if not currency:
            try:
                currency = await self.default_currency()
            except StorageError as e:
                await self._audit_logger.log_storage_error(
                    "read_default_currency", str(e), correlation_id=correlation_id
                )
                raise

        return await self._ledger.insert(
            amount=amount,
            currency=currency,
            occurred_at=occurred_at,
            tag_id=tag_id,
            type=type,
            note=note,
            correlation_id=correlation_id,
        )


class ReportingFlow:
    """
    Orchestrates the list/statistics refresh.

    A refresh is an explicit call. If a newer request was issued meanwhile,
    the caller simply drops the older result.
    """

    def __init__(
        self,
        executor: ReportExecutor,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._executor = executor
        self._audit_logger = audit_logger or AuditLogger()

    async def refresh(
        self,
        request: ReportRequest,
        previous: Optional[LedgerReport] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerReport:
        """
        Build the report for a request.

        On a storage failure the previous report (if any) is returned,
        otherwise an empty one; either way it is flagged degraded.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            report = await self._executor.execute(request)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                "refresh_report", str(e), degraded=True, correlation_id=correlation_id
            )
            if previous is not None:
                return previous.model_copy(
                    update={"degraded": True, "error_message": str(e)}
                )
            return self._executor.empty_report(request, error_message=str(e))

        await self._audit_logger.log_report_generated(
            report_id=report.report_id,
            transaction_count=len(report.transactions),
            bucket_count=len(report.statistics.buckets),
            correlation_id=correlation_id,
        )
        return report

    @staticmethod
    def navigate(request: ReportRequest, direction: NavigationDirection) -> ReportRequest:
        """The same request shifted one month backward or forward."""
        return request.model_copy(
            update={"window": DateWindowResolver.navigate(request.window, direction)}
        )

    @staticmethod
    def default_request(
        monthly: bool = False,
        type: TransactionType = TransactionType.EXPENSE,
        today: Optional[date] = None,
    ) -> ReportRequest:
        """Initial request: the last month up to today, or the current month."""
        window = (
            DateWindowResolver.current_month(today)
            if monthly
            else DateWindowResolver.default_sliding(today)
        )
        return ReportRequest(window=window, type=type)


class ManagementFlow:
    """
    Orchestrates everything that is not entry creation or reporting:
    custom tags, recurring expenses, preferences and deletions.
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        tags: TagCatalog,
        recurring: RecurringExpenseRegistry,
        settings_store: SettingsStore,
        fallback_currency: str,
    ):
        self._ledger = ledger
        self._tags = tags
        self._recurring = recurring
        self._settings = settings_store
        self._fallback_currency = fallback_currency

    # Tags

    async def list_tags(self) -> list[Tag]:
        return await self._tags.list_all()

    async def create_tag(
        self,
        name: str,
        type: TransactionType,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tag:
        kwargs = {}
        if icon:
            kwargs["icon"] = icon
        if color:
            kwargs["color"] = color
        return await self._tags.create(
            name, type, correlation_id=create_correlation_id(), **kwargs
        )

    async def delete_tag(self, tag_id: int) -> bool:
        """False when the tag is built-in or unknown."""
        return await self._tags.delete(tag_id, correlation_id=create_correlation_id())

    # Transactions

    async def delete_transaction(self, tx_id: int) -> None:
        await self._ledger.delete(tx_id, correlation_id=create_correlation_id())

    # Recurring expenses

    async def list_recurring(self) -> list[RecurringExpenseView]:
        return await self._recurring.list_all()

    async def create_recurring(
        self,
        amount: AmountInput,
        day_of_month: int,
        tag_id: Optional[int],
        note: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> int:
        """Add a recurring expense; currency defaults to the stored default."""
        currency = currency or await self._settings.get_default_currency(self._fallback_currency)
        return await self._recurring.create(
            amount=amount,
            currency=currency,
            day_of_month=day_of_month,
            tag_id=tag_id,
            note=note,
            correlation_id=create_correlation_id(),
        )

    async def delete_recurring(self, rec_id: int) -> None:
        await self._recurring.delete(rec_id, correlation_id=create_correlation_id())

    # Preferences

    async def get_default_currency(self) -> str:
        return await self._settings.get_default_currency(self._fallback_currency)

    async def set_default_currency(self, code: str) -> str:
        return await self._settings.set_default_currency(
            code, correlation_id=create_correlation_id()
        )


async def create_app_components(
    db_path: Optional[str] = None,
    store: Optional[EntityStoreInterface] = None,
) -> tuple[EntryCreationFlow, ReportingFlow, ManagementFlow, EntityStoreInterface]:
    """
    Factory function to create all application components.

    Opens (and on first run creates and seeds) the store, then wires the
    services and flows around it.

    Args:
        db_path: SQLite file; defaults to the configured path
        store: An already constructed store, used instead of SQLite

    Returns:
        (entry_flow, reporting_flow, management_flow, store)
    """
    fallback_currency = get_settings().app.fallback_currency

    if store is None:
        store = SQLiteEntityStore(SQLiteClient(db_path))
    await store.initialize(fallback_currency)

    audit_logger = AuditLogger()
    ledger = TransactionLedger(store, audit_logger=audit_logger)
    tags = TagCatalog(store, audit_logger=audit_logger)
    recurring = RecurringExpenseRegistry(store, audit_logger=audit_logger)
    settings_store = SettingsStore(store, audit_logger=audit_logger)

    entry_flow = EntryCreationFlow(
        ledger=ledger,
        tags=tags,
        settings_store=settings_store,
        fallback_currency=fallback_currency,
        audit_logger=audit_logger,
    )
    reporting_flow = ReportingFlow(
        executor=ReportExecutor(ledger, fallback_currency),
        audit_logger=audit_logger,
    )
    management_flow = ManagementFlow(
        ledger=ledger,
        tags=tags,
        recurring=recurring,
        settings_store=settings_store,
        fallback_currency=fallback_currency,
    )

    return entry_flow, reporting_flow, management_flow, store
