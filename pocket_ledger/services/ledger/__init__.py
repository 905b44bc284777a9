"""Ledger services: tags, transactions, recurring expenses and settings."""

from pocket_ledger.services.ledger.recurring_registry import RecurringExpenseRegistry
from pocket_ledger.services.ledger.settings_store import SettingsStore
from pocket_ledger.services.ledger.tag_catalog import TagCatalog
from pocket_ledger.services.ledger.transaction_ledger import TransactionLedger

__all__ = [
    "RecurringExpenseRegistry",
    "SettingsStore",
    "TagCatalog",
    "TransactionLedger",
]
