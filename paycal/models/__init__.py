"""
Data Models Package

This package contains all Pydantic models used in Paycal.
All data flowing through the engine must conform to these schemas.
"""

from paycal.models.event import (
    CalendarEvent,
    EventType,
    Frequency,
    new_event_id,
)
from paycal.models.views import (
    DayCell,
    MonthlySummary,
    RescheduleReport,
    UpcomingPayday,
)
from paycal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Event models
    "CalendarEvent",
    "EventType",
    "Frequency",
    "new_event_id",
    # Result models
    "DayCell",
    "MonthlySummary",
    "RescheduleReport",
    "UpcomingPayday",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
