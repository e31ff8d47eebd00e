"""Services package."""

from paycal.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    EventStorageInterface,
    InMemoryAuditStorage,
    InMemoryEventStorage,
    JsonFileEventStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "EventStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryEventStorage",
    "JsonFileEventStorage",
    "NotFoundError",
    "StorageError",
]
