"""
In-Memory Storage

Used by tests and by hosts that keep the snapshot elsewhere.
Snapshots are stored as lists of immutable events, so handing them
out does not expose internal state.
"""

from typing import Optional
from uuid import UUID

from paycal.models.audit import AuditEvent
from paycal.models.event import CalendarEvent
from paycal.services.storage.interface import (
    AuditStorageInterface,
    EventStorageInterface,
    ensure_unique_ids,
)


class InMemoryEventStorage(EventStorageInterface):
    """Per-user event snapshots held in a dict."""

    def __init__(self):
        self._events: dict[str, list[CalendarEvent]] = {}

    async def list_events(self, user_id: str) -> list[CalendarEvent]:
        return list(self._events.get(user_id, []))

    async def get_event(self, user_id: str, event_id: str) -> Optional[CalendarEvent]:
        for event in self._events.get(user_id, []):
            if event.id == event_id:
                return event
        return None

    async def replace_events(self, user_id: str, events: list[CalendarEvent]) -> int:
        ensure_unique_ids(events)
        self._events[user_id] = list(events)
        return len(events)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
