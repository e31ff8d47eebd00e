"""
Abstract Storage Interface

DESIGN DECISION: The engine never touches storage. The host loads a
user's snapshot, runs the engine, and writes the whole new snapshot
back. That is the only contract a backend has to honour, so this
interface is deliberately small:

1. Swap the JSON snapshot for a real database later
2. Use in-memory storage for testing
3. Keep scheduling logic decoupled from storage
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from paycal.models.audit import AuditEvent
from paycal.models.event import CalendarEvent


class EventStorageInterface(ABC):
    """
    Abstract interface for per-user calendar event storage.

    Events are always scoped by an opaque user id supplied by the
    identity provider.
    """

    @abstractmethod
    async def list_events(self, user_id: str) -> list[CalendarEvent]:
        """
        Load a user's full event snapshot.

        Returns:
            All events for the user (empty list for unknown users)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def get_event(self, user_id: str, event_id: str) -> Optional[CalendarEvent]:
        """
        Retrieve one event by id.

        Returns:
            The event if found, None otherwise
        """
        pass

    @abstractmethod
    async def replace_events(self, user_id: str, events: list[CalendarEvent]) -> int:
        """
        Replace a user's snapshot with `events`.

        Returns:
            Number of events stored

        Raises:
            DuplicateError: If two events share an id
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one delete and its reschedule).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to store two entities with the same id."""
    pass


def ensure_unique_ids(events: list[CalendarEvent]) -> None:
    """Raise DuplicateError if any id repeats."""
    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            raise DuplicateError(f"Duplicate event id: {event.id}")
        seen.add(event.id)
