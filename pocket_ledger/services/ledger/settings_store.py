"""
Settings Store

Key/value user preferences. The only key the application itself relies
on is the default currency.
"""

from typing import Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.ledger import DEFAULT_CURRENCY_KEY
from pocket_ledger.services.storage import EntityStoreInterface, StorageError
from pocket_ledger.validation import EntryValidator, normalize_currency


class SettingsStore:
    def __init__(
        self,
        store: EntityStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit = audit_logger or AuditLogger()

    async def get(self, key: str) -> Optional[str]:
        return await self._store.get_setting(key)

    async def set(
        self,
        key: str,
        value: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Insert or overwrite a setting."""
        try:
            await self._store.upsert_setting(key, value)
        except StorageError as e:
            await self._audit.log_storage_error("set_setting", str(e), correlation_id=correlation_id)
            raise
        await self._audit.log_setting_updated(key, value, correlation_id)

    async def get_default_currency(self, fallback: str) -> str:
        """The stored default currency, or the fallback when unset."""
        value = await self.get(DEFAULT_CURRENCY_KEY)
        return normalize_currency(value) or normalize_currency(fallback)

    async def set_default_currency(
        self,
        code: str,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Store a new default currency.

        Returns the normalized (upper-cased) code.

        Raises:
            ValidationError: If the code is blank or too long
        """
        code = normalize_currency(code)
        result = self._validator.validate_currency(code)
        if result.has_errors:
            await self._audit.log_validation_failed(
                result.operation,
                [i.model_dump() for i in result.issues],
                correlation_id,
            )
        self._validator.ensure_valid(result)

        await self.set(DEFAULT_CURRENCY_KEY, code, correlation_id)
        return code
