"""
Audit Models for Paycal

Every mutation of a user's calendar is logged for audit purposes.
This provides:
1. Traceability of automatic reschedules and split redistributions
2. Debugging information when a balance looks wrong
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each calendar mutation and each automatic engine decision has its
    own event type.
    """
    # User mutations
    EVENT_ADDED = "event_added"
    EVENT_UPDATED = "event_updated"
    EVENT_DELETED = "event_deleted"
    RECURRING_SERIES_DELETED = "recurring_series_deleted"

    # Programmatic creation
    SPLIT_BILL_CREATED = "split_bill_created"
    SAVINGS_BILL_CREATED = "savings_bill_created"

    # Engine decisions
    BILL_RESCHEDULED = "bill_rescheduled"
    BILL_UNAFFORDABLE = "bill_unaffordable"
    SPLIT_REDISTRIBUTED = "split_redistributed"

    # System events
    STORAGE_FAILED = "storage_failed"
    SYSTEM_ERROR = "system_error"


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

    Not to be confused with CalendarEvent: this records something that
    happened TO the calendar.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique audit event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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

    # Context
    user_id: Optional[str] = Field(
        default=None,
        description="Opaque id of the user whose calendar changed"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'event', 'series')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the calendar event this relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., everything one delete caused)"
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
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list[str]:
        """
        Convert to a flat row for tabular audit storage.

        Columns:
        [event_id, timestamp, event_type, severity, user_id, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.event_added(user_id, event, correlation_id)
        event = AuditEventBuilder.bill_rescheduled(user_id, bill, original_date, correlation_id)
    """

    @staticmethod
    def event_added(
        user_id: str,
        event_id: str,
        event_type: str,
        title: str,
        occurrences: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_ADDED,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"Added {event_type} '{title}' ({occurrences} occurrences)",
            details={
                "type": event_type,
                "title": title,
                "occurrences": occurrences,
            },
            is_user_action=True,
        )

    @staticmethod
    def event_updated(
        user_id: str,
        event_id: str,
        changed_fields: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_UPDATED,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"Updated event fields: {', '.join(changed_fields) or 'none'}",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def event_deleted(
        user_id: str,
        event_id: str,
        title: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_DELETED,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"Deleted event '{title}'",
            details={
                "title": title,
            },
            is_user_action=True,
        )

    @staticmethod
    def recurring_series_deleted(
        user_id: str,
        title: str,
        removed: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_SERIES_DELETED,
            user_id=user_id,
            entity_type="series",
            correlation_id=correlation_id,
            description=f"Deleted recurring series '{title}' ({removed} events)",
            details={
                "title": title,
                "removed": removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def split_bill_created(
        user_id: str,
        title: str,
        total: Decimal,
        parts: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_BILL_CREATED,
            user_id=user_id,
            entity_type="series",
            correlation_id=correlation_id,
            description=f"Split '{title}' into {parts} payments",
            details={
                "title": title,
                "total": str(total),
                "parts": parts,
            },
            is_user_action=True,
        )

    @staticmethod
    def savings_bill_created(
        user_id: str,
        event_id: str,
        payday_id: str,
        amount: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVINGS_BILL_CREATED,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"Savings bill of {amount} created for payday",
            details={
                "payday_id": payday_id,
                "amount": str(amount),
            },
        )

    @staticmethod
    def bill_rescheduled(
        user_id: str,
        event_id: str,
        title: str,
        original_date: str,
        new_date: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_RESCHEDULED,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"Bill '{title}' moved from {original_date} to {new_date}",
            details={
                "original_date": original_date,
                "new_date": new_date,
            },
        )

    @staticmethod
    def bill_unaffordable(
        user_id: str,
        event_id: str,
        title: str,
        due_date: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UNAFFORDABLE,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="event",
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"No payday within the window can cover '{title}' due {due_date}",
            details={
                "due_date": due_date,
            },
        )

    @staticmethod
    def split_redistributed(
        user_id: str,
        deleted_id: str,
        base_title: str,
        sibling_ids: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_REDISTRIBUTED,
            user_id=user_id,
            entity_type="event",
            entity_id=deleted_id,
            correlation_id=correlation_id,
            description=f"Redistributed '{base_title}' across {len(sibling_ids)} remaining payments",
            details={
                "base_title": base_title,
                "sibling_ids": sibling_ids,
            },
        )

    @staticmethod
    def storage_failed(
        user_id: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Storage operation failed: {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
