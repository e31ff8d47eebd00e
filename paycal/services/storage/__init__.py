"""
Storage Services Package

Provides abstract interfaces and concrete implementations for event
and audit storage. Backends are swappable behind the interfaces.
"""

from paycal.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    EventStorageInterface,
    NotFoundError,
    StorageError,
)
from paycal.services.storage.json_file import JsonFileEventStorage
from paycal.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryEventStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "EventStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryEventStorage",
    "JsonFileEventStorage",
]
