"""
Audit Models for Pocket Ledger

Every mutating ledger operation (and every refused or failed one) produces
an AuditEvent. Events are written to the local structured log; they are
never persisted into the ledger tables themselves.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutating operation on the four record kinds has its own event type.
    """
    # Tags
    TAG_CREATED = "tag_created"
    TAG_DELETED = "tag_deleted"
    TAG_DELETE_REFUSED = "tag_delete_refused"

    # Transactions
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_DELETED = "transaction_deleted"

    # Recurring expenses
    RECURRING_CREATED = "recurring_created"
    RECURRING_DELETED = "recurring_deleted"

    # Settings
    SETTING_UPDATED = "setting_updated"

    # Reporting
    REPORT_GENERATED = "report_generated"
    REPORT_DEGRADED = "report_degraded"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Record kind (e.g., 'tag', 'transaction', 'setting')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identity of the record (row id or setting key)"
    )

    # Correlation - for tracking the steps of one flow
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., read default currency then insert)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.tag_created(tag_id, name, correlation_id)
        event = AuditEventBuilder.transaction_recorded(tx_id, "12.50", "CNY")
    """

    @staticmethod
    def tag_created(
        tag_id: int,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAG_CREATED,
            entity_type="tag",
            entity_id=str(tag_id),
            correlation_id=correlation_id,
            description=f"Custom tag created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def tag_deleted(
        tag_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAG_DELETED,
            entity_type="tag",
            entity_id=str(tag_id),
            correlation_id=correlation_id,
            description=f"Custom tag deleted: {tag_id}",
            is_user_action=True,
        )

    @staticmethod
    def tag_delete_refused(
        tag_id: int,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAG_DELETE_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="tag",
            entity_id=str(tag_id),
            correlation_id=correlation_id,
            description=f"Refused to delete built-in tag: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def transaction_recorded(
        tx_id: int,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=str(tx_id),
            correlation_id=correlation_id,
            description=f"Transaction recorded: {amount} {currency}",
            details={
                "amount": amount,
                "currency": currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        tx_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=str(tx_id),
            correlation_id=correlation_id,
            description=f"Transaction deleted: {tx_id}",
            is_user_action=True,
        )

    @staticmethod
    def recurring_created(
        rec_id: int,
        amount: str,
        currency: str,
        day_of_month: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_CREATED,
            entity_type="recurring_expense",
            entity_id=str(rec_id),
            correlation_id=correlation_id,
            description=f"Recurring expense created: {amount} {currency} on day {day_of_month}",
            details={
                "amount": amount,
                "currency": currency,
                "day_of_month": day_of_month,
            },
            is_user_action=True,
        )

    @staticmethod
    def recurring_deleted(
        rec_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_DELETED,
            entity_type="recurring_expense",
            entity_id=str(rec_id),
            correlation_id=correlation_id,
            description=f"Recurring expense deleted: {rec_id}",
            is_user_action=True,
        )

    @staticmethod
    def setting_updated(
        key: str,
        value: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTING_UPDATED,
            entity_type="setting",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Setting updated: {key}",
            details={"value": value},
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        report_id: UUID,
        transaction_count: int,
        bucket_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            severity=AuditSeverity.DEBUG,
            entity_type="report",
            entity_id=str(report_id),
            correlation_id=correlation_id,
            description=f"Report generated: {transaction_count} transactions, {bucket_count} buckets",
            details={
                "transaction_count": transaction_count,
                "bucket_count": bucket_count,
            },
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Validation failed for {operation} with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        degraded: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.REPORT_DEGRADED if degraded else AuditEventType.STORAGE_ERROR
            ),
            severity=AuditSeverity.ERROR,
            description=f"Storage failure during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
                "degraded": degraded,
            },
            correlation_id=correlation_id,
        )

