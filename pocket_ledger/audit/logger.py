"""
Audit Logger

Every mutating ledger operation (and every refused, invalid or failed one)
is written to the local structured log. The audit logger:
- Never raises - a logging failure must not break a ledger operation
- Supports correlation IDs to trace the steps of one flow
  (e.g., read default currency, then insert transaction)
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.config import get_settings
from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging() -> None:
    """Configure stdlib logging and structlog from AppSettings."""
    app_settings = get_settings().app
    logging.basicConfig(format="%(message)s", level=app_settings.log_level)
    logging.getLogger("pocket_ledger").setLevel(app_settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if app_settings.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, logger_name: str = "pocket_ledger.audit"):
        self._logger = structlog.get_logger(logger_name)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).warning(
                "audit logging failed for %s: %s", event.event_id, e
            )
            return False
        return True

    async def log_tag_created(
        self,
        tag_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tag_created(tag_id, name, correlation_id))

    async def log_tag_deleted(
        self,
        tag_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tag_deleted(tag_id, correlation_id))

    async def log_tag_delete_refused(
        self,
        tag_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tag_delete_refused(tag_id, name, correlation_id))

    async def log_transaction_recorded(
        self,
        tx_id: int,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.transaction_recorded(tx_id, amount, currency, correlation_id)
        )

    async def log_transaction_deleted(
        self,
        tx_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(tx_id, correlation_id))

    async def log_recurring_created(
        self,
        rec_id: int,
        amount: str,
        currency: str,
        day_of_month: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.recurring_created(
                rec_id, amount, currency, day_of_month, correlation_id
            )
        )

    async def log_recurring_deleted(
        self,
        rec_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_deleted(rec_id, correlation_id))

    async def log_setting_updated(
        self,
        key: str,
        value: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.setting_updated(key, value, correlation_id))

    async def log_report_generated(
        self,
        report_id: UUID,
        transaction_count: int,
        bucket_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.report_generated(
                report_id, transaction_count, bucket_count, correlation_id
            )
        )

    async def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(operation, issues, correlation_id))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        degraded: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.storage_error(operation, error_message, degraded, correlation_id)
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through every
    store call the action makes.
    """
    return uuid4()
