"""
Shared fixtures.

Storage-backed tests run against a fresh SQLite file per test; nothing
touches the configured database.
"""

import pytest
import pytest_asyncio

from pocket_ledger.audit import AuditLogger
from pocket_ledger.services.ledger import (
    RecurringExpenseRegistry,
    SettingsStore,
    TagCatalog,
    TransactionLedger,
)
from pocket_ledger.services.storage import SQLiteClient, SQLiteEntityStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "ledger.db")


@pytest_asyncio.fixture
async def store(db_path):
    store = SQLiteEntityStore(SQLiteClient(db_path))
    await store.initialize("CNY")
    yield store
    await store.close()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def ledger(store, audit_logger):
    return TransactionLedger(store, audit_logger=audit_logger)


@pytest.fixture
def tag_catalog(store, audit_logger):
    return TagCatalog(store, audit_logger=audit_logger)


@pytest.fixture
def recurring_registry(store, audit_logger):
    return RecurringExpenseRegistry(store, audit_logger=audit_logger)


@pytest.fixture
def settings_store(store, audit_logger):
    return SettingsStore(store, audit_logger=audit_logger)


@pytest_asyncio.fixture
async def builtin(store):
    """Built-in tag ids by name."""
    return {tag.name: tag.id for tag in await store.list_tags() if not tag.is_custom}
