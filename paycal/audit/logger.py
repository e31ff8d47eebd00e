"""
Audit Logger

DESIGN DECISION: Every calendar mutation and every automatic engine
decision (a bill moved, a bill left unaffordable, a split redistributed)
is logged. This provides:
1. Traceability of changes the user did not make directly
2. Debugging capability when a balance looks wrong
3. A history the user can inspect

The audit logger:
- Is async to match the storage interfaces
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from paycal.models.audit import AuditEvent, AuditEventBuilder
from paycal.models.views import RescheduleReport
from paycal.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for JSON output."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))

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
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("paycal.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_event_added(
        self,
        user_id: str,
        event_id: str,
        event_type: str,
        title: str,
        occurrences: int,
        correlation_id: UUID,
    ) -> None:
        """Log a user-created event (and its recurrence expansion)."""
        await self.log(AuditEventBuilder.event_added(
            user_id=user_id,
            event_id=event_id,
            event_type=event_type,
            title=title,
            occurrences=occurrences,
            correlation_id=correlation_id,
        ))

    async def log_event_updated(
        self,
        user_id: str,
        event_id: str,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.event_updated(
            user_id=user_id,
            event_id=event_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    async def log_event_deleted(
        self,
        user_id: str,
        event_id: str,
        title: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.event_deleted(
            user_id=user_id,
            event_id=event_id,
            title=title,
            correlation_id=correlation_id,
        ))

    async def log_series_deleted(
        self,
        user_id: str,
        title: str,
        removed: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_series_deleted(
            user_id=user_id,
            title=title,
            removed=removed,
            correlation_id=correlation_id,
        ))

    async def log_split_created(
        self,
        user_id: str,
        title: str,
        total: Decimal,
        parts: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.split_bill_created(
            user_id=user_id,
            title=title,
            total=total,
            parts=parts,
            correlation_id=correlation_id,
        ))

    async def log_savings_created(
        self,
        user_id: str,
        event_id: str,
        payday_id: str,
        amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.savings_bill_created(
            user_id=user_id,
            event_id=event_id,
            payday_id=payday_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_split_redistributed(
        self,
        user_id: str,
        deleted_id: str,
        base_title: str,
        sibling_ids: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.split_redistributed(
            user_id=user_id,
            deleted_id=deleted_id,
            base_title=base_title,
            sibling_ids=sibling_ids,
            correlation_id=correlation_id,
        ))

    async def log_reschedule_report(
        self,
        user_id: str,
        report: RescheduleReport,
        original_dates: dict[str, str],
        correlation_id: UUID,
    ) -> None:
        """
        Log the outcome of a reschedule pass.

        Only bills that moved during THIS pass are logged as moves;
        infeasible bills are logged every pass until they are covered.
        """
        for bill in report.moved:
            await self.log(AuditEventBuilder.bill_rescheduled(
                user_id=user_id,
                event_id=bill.id,
                title=bill.title,
                original_date=original_dates.get(bill.id, ""),
                new_date=bill.date.isoformat(),
                correlation_id=correlation_id,
            ))
        for bill in report.infeasible:
            await self.log(AuditEventBuilder.bill_unaffordable(
                user_id=user_id,
                event_id=bill.id,
                title=bill.title,
                due_date=bill.date.isoformat(),
                correlation_id=correlation_id,
            ))

    async def log_storage_failed(
        self,
        user_id: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_failed(
            user_id=user_id,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., deleting a split bill).
    Pass it through all subsequent operations.
    """
    return uuid4()
