"""Services package."""

from payshare.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryJobStorage,
    JobStorageInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryJobStorage",
    "JobStorageInterface",
    "NotFoundError",
    "StorageError",
]
