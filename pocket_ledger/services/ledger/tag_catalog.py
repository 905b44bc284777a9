"""
Tag Catalog

Manages the category vocabulary: the built-in tags seeded with the store
and the custom tags users add. Built-ins can never be deleted; a delete
request against one is refused silently (and audited).

Deleting a custom tag does not touch transactions that reference it.
Those keep their tag_id and resolve to the "Other" fallback from then on.
"""

from typing import Optional, Union
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.ledger import (
    DEFAULT_TAG_ICON,
    NEUTRAL_COLOR,
    MissingTag,
    ResolvedTag,
    Tag,
    TransactionType,
    resolve_tag_ref,
)
from pocket_ledger.services.storage import (
    EntityStoreInterface,
    NotFoundError,
    StorageError,
)
from pocket_ledger.validation import EntryValidator


class TagCatalog:
    """CRUD over tags with built-in deletion protection."""

    def __init__(
        self,
        store: EntityStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit = audit_logger or AuditLogger()

    async def list_all(self) -> list[Tag]:
        """All tags, ordered by (type, id)."""
        return await self._store.list_tags()

    async def list_by_type(self, type: TransactionType) -> list[Tag]:
        """Tags usable for one entry type, ordered by id."""
        return await self._store.list_tags(type=type)

    async def get(self, tag_id: Optional[int]) -> Union[ResolvedTag, MissingTag]:
        """Resolve a (possibly dangling) tag reference."""
        if tag_id is None:
            return MissingTag()
        return resolve_tag_ref(tag_id, await self._store.get_tag(tag_id))

    async def create(
        self,
        name: str,
        type: TransactionType,
        icon: str = DEFAULT_TAG_ICON,
        color: str = NEUTRAL_COLOR,
        correlation_id: Optional[UUID] = None,
    ) -> Tag:
        """
        Create a custom tag.

        Raises:
            ValidationError: If the name, type or color is invalid
            StorageError: If the insert fails
        """
        entry_type, result = self._validator.validate_tag(name, type, color)
        if result.has_errors:
            await self._audit.log_validation_failed(
                result.operation,
                [i.model_dump() for i in result.issues],
                correlation_id,
            )
        self._validator.ensure_valid(result)

        try:
            tag = await self._store.insert_tag(
                name=name.strip(),
                type=entry_type,
                icon=icon.strip() or DEFAULT_TAG_ICON,
                color=color,
                is_custom=True,
            )
        except StorageError as e:
            await self._audit.log_storage_error("create_tag", str(e), correlation_id=correlation_id)
            raise

        await self._audit.log_tag_created(tag.id, tag.name, correlation_id)
        return tag

    async def delete(
        self,
        tag_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a custom tag.

        Returns True only if a row was removed. Built-in tags and unknown
        ids are left alone without raising.
        """
        try:
            tag = await self._store.get_tag(tag_id)
            if tag is None:
                return False
            if not tag.is_custom:
                await self._audit.log_tag_delete_refused(tag.id, tag.name, correlation_id)
                return False
            await self._store.delete_tag(tag_id)
        except NotFoundError:
            return False
        except StorageError as e:
            await self._audit.log_storage_error("delete_tag", str(e), correlation_id=correlation_id)
            raise

        await self._audit.log_tag_deleted(tag_id, correlation_id)
        return True
