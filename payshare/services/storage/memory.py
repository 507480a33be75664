"""
In-Memory Storage Implementation

Keeps jobs and audit events in process memory. Used by default when
no database is wired in, and by the test suite.

Records are pydantic models; they are deep-copied on the way in and
out so callers can never mutate what is stored.
"""

from typing import Optional
from uuid import UUID

from payshare.models.audit import AuditEvent
from payshare.models.job import Frequency, JobRecord
from payshare.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    JobStorageInterface,
    NotFoundError,
)


def _matches(job: JobRecord, search: Optional[str], frequency: Optional[Frequency]) -> bool:
    if frequency is not None and job.request.frequency != frequency:
        return False
    if search:
        needle = search.lower()
        roles = job.request.roles
        haystack = (
            job.request.project_name,
            roles.working_dev,
            roles.job_hunter,
            roles.communicator,
        )
        if not any(needle in value.lower() for value in haystack):
            return False
    return True


class InMemoryJobStorage(JobStorageInterface):
    """Dictionary-backed job storage."""

    def __init__(self):
        self._jobs: dict[UUID, JobRecord] = {}

    async def save_job(self, job: JobRecord) -> bool:
        if job.id in self._jobs:
            raise DuplicateError(f"Job already exists: {job.id}")
        self._jobs[job.id] = job.model_copy(deep=True)
        return True

    async def get_job(self, owner_id: str, job_id: UUID) -> Optional[JobRecord]:
        job = self._jobs.get(job_id)
        if job is None or job.owner_id != owner_id:
            return None
        return job.model_copy(deep=True)

    async def replace_job(self, job: JobRecord) -> bool:
        existing = self._jobs.get(job.id)
        if existing is None or existing.owner_id != job.owner_id:
            raise NotFoundError(f"Job not found: {job.id}")
        self._jobs[job.id] = job.model_copy(deep=True)
        return True

    async def delete_job(self, owner_id: str, job_id: UUID) -> bool:
        job = self._jobs.get(job_id)
        if job is None or job.owner_id != owner_id:
            return False
        del self._jobs[job_id]
        return True

    def _filtered(
        self,
        owner_id: str,
        search: Optional[str],
        frequency: Optional[Frequency],
    ) -> list[JobRecord]:
        jobs = [
            job for job in self._jobs.values()
            if job.owner_id == owner_id and _matches(job, search, frequency)
        ]
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return jobs

    async def list_jobs(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[JobRecord]:
        jobs = self._filtered(owner_id, search, frequency)
        return [job.model_copy(deep=True) for job in jobs[offset:offset + limit]]

    async def count_jobs(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
    ) -> int:
        return len(self._filtered(owner_id, search, frequency))


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

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

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
