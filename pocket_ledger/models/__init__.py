"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from pocket_ledger.models.ledger import (
    BUILTIN_TAGS,
    DEFAULT_CURRENCY_KEY,
    DEFAULT_TAG_ICON,
    MISSING_TAG_NAME,
    NEUTRAL_COLOR,
    OTHER_BUCKET_ID,
    AggregationResult,
    CategoryBucket,
    DateWindow,
    LedgerReport,
    MissingTag,
    MonthlyWindow,
    NavigationDirection,
    RecurringExpense,
    RecurringExpenseView,
    ReportRequest,
    ResolvedTag,
    Setting,
    SlidingWindow,
    Tag,
    TagRef,
    Transaction,
    TransactionFilter,
    TransactionType,
    TransactionView,
    ValidationIssue,
    ValidationResult,
    resolve_tag_ref,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Constants
    "BUILTIN_TAGS",
    "DEFAULT_CURRENCY_KEY",
    "DEFAULT_TAG_ICON",
    "MISSING_TAG_NAME",
    "NEUTRAL_COLOR",
    "OTHER_BUCKET_ID",
    # Ledger models
    "AggregationResult",
    "CategoryBucket",
    "DateWindow",
    "LedgerReport",
    "MissingTag",
    "MonthlyWindow",
    "NavigationDirection",
    "RecurringExpense",
    "RecurringExpenseView",
    "ReportRequest",
    "ResolvedTag",
    "Setting",
    "SlidingWindow",
    "Tag",
    "TagRef",
    "Transaction",
    "TransactionFilter",
    "TransactionType",
    "TransactionView",
    "ValidationIssue",
    "ValidationResult",
    "resolve_tag_ref",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
