"""
Tests for Pocket Ledger models

Test strategy:
1. Unit tests for pure components (models, date windows, aggregation)
2. Integration tests for services and flows against a temporary SQLite file
3. No shared database between tests
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from pocket_ledger.models.ledger import (
    MISSING_TAG_NAME,
    NEUTRAL_COLOR,
    DateWindow,
    MissingTag,
    MonthlyWindow,
    ReportRequest,
    ResolvedTag,
    Setting,
    SlidingWindow,
    Tag,
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


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_tag_creation(self):
        """Test Tag model creation with defaults."""
        tag = Tag(id=1, name="Food", type=TransactionType.EXPENSE)
        assert tag.icon == "tag"
        assert tag.color == NEUTRAL_COLOR
        assert tag.is_custom is False

    def test_tag_strips_whitespace(self):
        """Test that whitespace is stripped from tag name."""
        tag = Tag(id=1, name="  Coffee  ", type="expense")
        assert tag.name == "Coffee"

    def test_tag_rejects_bad_color(self):
        """Test that a non-hex color is rejected."""
        with pytest.raises(PydanticValidationError):
            Tag(id=1, name="Food", type="expense", color="red")

    def test_setting_requires_key(self):
        """Test that a setting needs a non-empty key."""
        assert Setting(key="defaultCurrency", value="CNY").value == "CNY"
        with pytest.raises(PydanticValidationError):
            Setting(key="", value="CNY")

    def test_transaction_filter_empty_tags(self):
        """Test that an empty tag set means no tag filter."""
        criteria = TransactionFilter(date_start=date(2024, 3, 1), date_end=date(2024, 3, 31))
        assert criteria.tag_ids == frozenset()
        assert criteria.has_tag_filter is False

    def test_transaction_filter_is_frozen(self):
        """Test that filters cannot be mutated after creation."""
        criteria = TransactionFilter(date_start=date(2024, 3, 1), date_end=date(2024, 3, 31))
        with pytest.raises(PydanticValidationError):
            criteria.date_end = date(2024, 4, 30)

    def test_report_request_normalizes_currency(self):
        """Test that the requested currency is upper-cased and blanks dropped."""
        window = MonthlyWindow(year=2024, month=3)
        assert ReportRequest(window=window, currency=" usd ").currency == "USD"
        assert ReportRequest(window=window, currency="  ").currency is None

    def test_monthly_window_month_range(self):
        """Test that month must be 1..12."""
        with pytest.raises(PydanticValidationError):
            MonthlyWindow(year=2024, month=13)

    def test_date_window_discriminator(self):
        """Test that the window union is picked by mode."""
        adapter = TypeAdapter(DateWindow)
        window = adapter.validate_python({"mode": "monthly", "year": 2024, "month": 2})
        assert isinstance(window, MonthlyWindow)
        window = adapter.validate_python(
            {"mode": "sliding", "start_date": "2024-01-01", "end_date": "2024-01-31"}
        )
        assert isinstance(window, SlidingWindow)


class TestTagResolution:
    """Tests for resolved/missing tag references."""

    def test_resolved_tag(self):
        """Test that an existing tag resolves to itself."""
        tag = Tag(id=3, name="Shopping", type="expense", color="#E91E63")
        ref = resolve_tag_ref(3, tag)
        assert isinstance(ref, ResolvedTag)
        assert ref.display_name == "Shopping"
        assert ref.display_color == "#E91E63"

    def test_missing_tag(self):
        """Test that a dangling reference resolves to the fallback."""
        ref = resolve_tag_ref(42, None)
        assert isinstance(ref, MissingTag)
        assert ref.tag_id == 42
        assert ref.display_name == MISSING_TAG_NAME
        assert ref.display_color == NEUTRAL_COLOR

    def test_transaction_view_labels(self):
        """Test that a view exposes the fallback label for a missing tag."""
        view = TransactionView(
            id=1,
            amount=Decimal("12.50"),
            currency="CNY",
            date=datetime(2024, 3, 5, 12, 0),
            tag_id=99,
            type="expense",
            tag_ref=MissingTag(tag_id=99),
        )
        assert view.tag_name == "Other"
        assert view.tag_color == NEUTRAL_COLOR


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TAG_CREATED,
            description="Test tag created",
        )
        assert event.event_type == AuditEventType.TAG_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            description="Transaction recorded",
            details={"amount": "100", "currency": "CNY"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_recorded"
        assert log_dict["details"]["currency"] == "CNY"

    def test_audit_event_builder_tag_delete_refused(self):
        """Test AuditEventBuilder.tag_delete_refused."""
        correlation_id = uuid4()
        event = AuditEventBuilder.tag_delete_refused(
            tag_id=1,
            name="Food",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.TAG_DELETE_REFUSED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_storage_error_degraded(self):
        """Test that a degraded read is recorded as report_degraded."""
        event = AuditEventBuilder.storage_error(
            operation="refresh_report",
            error_message="disk I/O error",
            degraded=True,
        )
        assert event.event_type == AuditEventType.REPORT_DEGRADED
        assert event.error_message == "disk I/O error"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            operation="insert_transaction",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.is_valid is False

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            operation="insert_transaction",
            issues=[
                ValidationIssue(
                    field="type",
                    issue_type="type_mismatch",
                    message="Tag type differs from entry type",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


class TestTransactionType:
    """Tests for the transaction type enum."""

    def test_values(self):
        """Test type string values."""
        assert TransactionType("expense") is TransactionType.EXPENSE
        assert TransactionType.INCOME.value == "income"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
