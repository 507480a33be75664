"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for job
and audit storage. The surrounding application supplies its own
database-backed implementation of the same interfaces.
"""

from payshare.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    JobStorageInterface,
    NotFoundError,
    StorageError,
)
from payshare.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryJobStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "JobStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryJobStorage",
]
