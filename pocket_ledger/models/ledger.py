"""
Core Data Models for Pocket Ledger

These models define the schemas for all data flowing through the ledger:
persisted records (tags, transactions, recurring expenses, settings),
the transient views computed per request, and the reporting request/result
contracts consumed by the presentation layer.

Amounts are Decimal end to end so that per-category sums reconcile
exactly with report totals.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_CURRENCY_KEY = "defaultCurrency"

# Display fallback for transactions whose tag has been deleted
MISSING_TAG_NAME = "Other"
NEUTRAL_COLOR = "#607D8B"
DEFAULT_TAG_ICON = "tag"

# Synthetic aggregation group for dangling/null tag references.
# Real tag ids come from AUTOINCREMENT and are always positive.
OTHER_BUCKET_ID = -1

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a ledger entry. Tags carry the same classification."""
    EXPENSE = "expense"
    INCOME = "income"


class NavigationDirection(str, Enum):
    """Step direction for date window navigation."""
    PREVIOUS = "previous"
    NEXT = "next"


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Tag(BaseModel):
    """
    A user-facing category.

    Built-in tags (is_custom=False) are seeded once and can never be
    deleted. Custom tags are created and destroyed by the user.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    type: TransactionType
    icon: str = Field(
        default=DEFAULT_TAG_ICON,
        description="Symbolic icon name, rendered by the presentation layer"
    )
    color: str = Field(
        default=NEUTRAL_COLOR,
        pattern=HEX_COLOR_PATTERN,
        description="RGB hex color"
    )
    is_custom: bool = False


class Transaction(BaseModel):
    """
    A single recorded income or expense.

    tag_id is a weak reference: the tag may be deleted later and the
    transaction is kept as-is. There is no edit path, only insert and delete.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the transaction's own currency"
    )
    currency: str = Field(
        ...,
        min_length=1,
        max_length=8,
        description="ISO-4217-like currency code"
    )
    date: datetime
    tag_id: Optional[int] = None
    type: TransactionType
    note: Optional[str] = None


class RecurringExpense(BaseModel):
    """
    A descriptive monthly obligation ("pay X around day D each month").

    Never turned into a Transaction automatically.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    amount: Decimal = Field(..., ge=0)
    currency: str = Field(..., min_length=1, max_length=8)
    day_of_month: int = Field(..., ge=1, le=31)
    tag_id: Optional[int] = None
    note: Optional[str] = None


class Setting(BaseModel):
    """A single key/value preference."""

    key: str = Field(..., min_length=1)
    value: str


# Built-in catalog, seeded into an empty tags table
BUILTIN_TAGS: list[dict] = [
    {"name": "Food",          "type": "expense", "icon": "food",            "color": "#F44336"},
    {"name": "Transport",     "type": "expense", "icon": "train",           "color": "#2196F3"},
    {"name": "Shopping",      "type": "expense", "icon": "cart",            "color": "#E91E63"},
    {"name": "Entertainment", "type": "expense", "icon": "movie",           "color": "#9C27B0"},
    {"name": "Housing",       "type": "expense", "icon": "home",            "color": "#FF9800"},
    {"name": "Utilities",     "type": "expense", "icon": "power",           "color": "#00BCD4"},
    {"name": "Salary",        "type": "income",  "icon": "cash",            "color": "#4CAF50"},
    {"name": "Other",         "type": "expense", "icon": "dots-horizontal", "color": NEUTRAL_COLOR},
]


# =============================================================================
# TAG RESOLUTION - tagged union for weak references
# =============================================================================

class ResolvedTag(BaseModel):
    """The referenced tag still exists."""

    kind: Literal["resolved"] = "resolved"
    tag: Tag

    @property
    def tag_id(self) -> int:
        return self.tag.id

    @property
    def display_name(self) -> str:
        return self.tag.name

    @property
    def display_color(self) -> str:
        return self.tag.color

    @property
    def display_icon(self) -> str:
        return self.tag.icon


class MissingTag(BaseModel):
    """The reference is null or points at a deleted tag."""

    kind: Literal["missing"] = "missing"
    tag_id: Optional[int] = None

    @property
    def display_name(self) -> str:
        return MISSING_TAG_NAME

    @property
    def display_color(self) -> str:
        return NEUTRAL_COLOR

    @property
    def display_icon(self) -> str:
        return DEFAULT_TAG_ICON


TagRef = Annotated[Union[ResolvedTag, MissingTag], Field(discriminator="kind")]


def resolve_tag_ref(tag_id: Optional[int], tag: Optional[Tag]) -> Union[ResolvedTag, MissingTag]:
    """Wrap an optional joined tag into the TagRef union."""
    if tag is not None:
        return ResolvedTag(tag=tag)
    return MissingTag(tag_id=tag_id)


# =============================================================================
# VIEWS - transient, computed per request
# =============================================================================

class TransactionView(Transaction):
    """A transaction joined with its (possibly missing) tag for display."""

    tag_ref: TagRef

    @property
    def tag_name(self) -> str:
        return self.tag_ref.display_name

    @property
    def tag_icon(self) -> str:
        return self.tag_ref.display_icon

    @property
    def tag_color(self) -> str:
        return self.tag_ref.display_color


class RecurringExpenseView(RecurringExpense):
    """A recurring expense joined with its tag for display."""

    tag_ref: TagRef

    @property
    def tag_name(self) -> str:
        return self.tag_ref.display_name


class TransactionFilter(BaseModel):
    """
    Declarative retrieval predicate for transactions.

    An empty tag_ids set means "no tag filter", not "match nothing".
    Both date bounds are inclusive and compared on the calendar day.
    """
    model_config = ConfigDict(frozen=True)

    date_start: date
    date_end: date
    tag_ids: frozenset[int] = Field(default_factory=frozenset)
    type: Optional[TransactionType] = None

    @property
    def has_tag_filter(self) -> bool:
        return len(self.tag_ids) > 0


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class CategoryBucket(BaseModel):
    """One category's share of an aggregation."""

    tag_id: int
    tag_name: str
    color: str
    sum: Decimal = Field(..., ge=0)
    percentage: int = Field(
        ...,
        ge=0,
        le=100,
        description="Independently rounded share of the total"
    )


class AggregationResult(BaseModel):
    """
    Per-category totals for one (type, currency) partition.

    Percentages are rounded per bucket and are not adjusted to sum to
    exactly 100. Sums always reconcile with total.
    """

    type: TransactionType
    currency: str
    total: Decimal = Decimal("0")
    buckets: list[CategoryBucket] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.buckets


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'out_of_range', 'not_found')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one mutating request."""

    operation: str = Field(
        ...,
        description="Operation being validated (e.g., 'insert_transaction')"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors


# =============================================================================
# DATE WINDOWS
# =============================================================================

class SlidingWindow(BaseModel):
    """
    Explicit date range.

    start_date <= end_date is expected but not enforced; an inverted
    range is resolved as given.
    """
    model_config = ConfigDict(frozen=True)

    mode: Literal["sliding"] = "sliding"
    start_date: date
    end_date: date


class MonthlyWindow(BaseModel):
    """A single calendar month."""
    model_config = ConfigDict(frozen=True)

    mode: Literal["monthly"] = "monthly"
    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)


DateWindow = Annotated[Union[SlidingWindow, MonthlyWindow], Field(discriminator="mode")]


# =============================================================================
# REPORTING MODELS
# =============================================================================

class ReportRequest(BaseModel):
    """
    Everything a list/statistics screen needs to ask for.

    currency is the caller's previous choice; it is kept only when the
    resolved range actually contains transactions in that currency.
    """

    window: DateWindow
    tag_ids: frozenset[int] = Field(default_factory=frozenset)
    type: TransactionType = TransactionType.EXPENSE
    currency: Optional[str] = None

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None


class LedgerReport(BaseModel):
    """Result of one reporting refresh."""

    report_id: UUID = Field(default_factory=uuid4)
    generated_at: datetime = Field(default_factory=_utcnow)

    date_start: date
    date_end: date
    window_label: str

    transactions: list[TransactionView] = Field(default_factory=list)
    available_currencies: list[str] = Field(default_factory=list)
    currency: str
    statistics: AggregationResult

    # Set when a storage failure forced an empty/previous result
    degraded: bool = False
    error_message: Optional[str] = None
