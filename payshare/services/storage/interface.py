"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Plug in whatever database the surrounding application uses
2. Use in-memory storage for testing
3. Keep the ledger decoupled from storage implementation

Storage never computes anything. It keeps what the ledger hands it
and returns it unchanged.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from payshare.models.audit import AuditEvent
from payshare.models.job import Frequency, JobRecord


class JobStorageInterface(ABC):
    """
    Abstract interface for job storage operations.

    Every read is scoped to an owner: a job that belongs to someone
    else is treated exactly like a job that does not exist.
    """

    @abstractmethod
    async def save_job(self, job: JobRecord) -> bool:
        """
        Save a new job.

        Raises:
            DuplicateError: If a job with the same id exists
        """
        pass

    @abstractmethod
    async def get_job(self, owner_id: str, job_id: UUID) -> Optional[JobRecord]:
        """
        Retrieve a job by id.

        Returns:
            The job if found and owned by owner_id, None otherwise
        """
        pass

    @abstractmethod
    async def replace_job(self, job: JobRecord) -> bool:
        """
        Replace a stored job wholesale.

        Raises:
            NotFoundError: If the job doesn't exist for its owner
        """
        pass

    @abstractmethod
    async def delete_job(self, owner_id: str, job_id: UUID) -> bool:
        """
        Delete a job.

        Returns:
            True if a job was deleted
        """
        pass

    @abstractmethod
    async def list_jobs(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[JobRecord]:
        """
        List an owner's jobs, newest first.

        Args:
            owner_id: Principal whose jobs to list
            search: Case-insensitive substring of project or role names
            frequency: Filter by payment frequency
            limit: Maximum number of results
            offset: Number of results to skip
        """
        pass

    @abstractmethod
    async def count_jobs(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
    ) -> int:
        """Count an owner's jobs matching the same filters as list_jobs."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event to the log."""
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for one request, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity, in chronological order."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
