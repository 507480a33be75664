"""
Job Ledger for PayShare

This module ties together validation, the distribution engines, storage
and auditing, and defines the job flows:
1. Preview (request -> validate -> compute)
2. Create (request -> validate -> compute -> reconcile -> save)
3. Update (load -> validate -> recompute -> replace)
4. History and statistics

DESIGN DECISION: The ledger enforces the boundaries:
- No engine runs on unvalidated input
- Nothing is saved before it is computed
- An update replaces the whole record; distributions are never merged
- Every change is audited
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import structlog

from payshare.audit import AuditLogger, create_correlation_id
from payshare.config import get_settings
from payshare.config.settings import Settings
from payshare.engine import compute_distribution, reconcile
from payshare.models.job import (
    DistributionKind,
    DistributionResult,
    Frequency,
    JobPage,
    JobRecord,
    JobRequest,
    JobStats,
    ReconciliationReport,
)
from payshare.queries import JobQueryExecutor
from payshare.services.storage import (
    InMemoryAuditStorage,
    InMemoryJobStorage,
    JobStorageInterface,
    NotFoundError,
    StorageError,
)
from payshare.validation import JobValidationError, JobValidator


logger = structlog.get_logger("payshare.ledger")


class JobLedger:
    """
    Records jobs and their distributions for authenticated owners.

    The owner id is whatever opaque principal the caller authenticated;
    jobs are only ever visible to the owner that created them.
    """

    def __init__(
        self,
        storage: JobStorageInterface,
        validator: Optional[JobValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._storage = storage
        self._validator = validator or JobValidator(self._settings.app)
        self._audit_logger = audit_logger
        self._queries = JobQueryExecutor(storage)

    def _with_defaults(self, request: JobRequest) -> JobRequest:
        """
        Fill in the configured conversion rate and, for an advanced
        request without a policy, the configured default policy.

        The stored request then records exactly what the split used.
        """
        defaults = self._settings.policy
        update = {}
        if request.conversion_rate is None:
            update["conversion_rate"] = defaults.conversion_rate
        if request.kind == DistributionKind.ADVANCED and request.policy is None:
            update["policy"] = defaults.default_policy()
        if not update:
            return request
        return request.model_copy(update=update)

    async def _validate(
        self,
        request: JobRequest,
        owner_id: Optional[str],
        correlation_id: UUID,
    ) -> None:
        result = self._validator.validate(request)
        if result.schema_valid:
            return

        if self._audit_logger:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
            ]
            await self._audit_logger.log_validation_failed(
                stage="schema",
                issues=issues,
                owner_id=owner_id,
                correlation_id=correlation_id,
            )
        raise JobValidationError(result)

    async def _compute(
        self,
        request: JobRequest,
        correlation_id: UUID,
    ) -> DistributionResult:
        distribution = compute_distribution(request)
        report = self.reconcile(distribution)

        if self._audit_logger:
            await self._audit_logger.log_distribution_computed(
                kind=distribution.kind.value,
                payment_amount=distribution.total,
                shares=distribution.to_flat_dict(),
                correlation_id=correlation_id,
            )
            if not report.is_balanced:
                await self._audit_logger.log_reconciliation_mismatch(
                    expected=report.expected_total,
                    allocated=report.allocated_total,
                    correlation_id=correlation_id,
                )
            if report.negative_shares:
                await self._audit_logger.log_negative_shares(
                    shares=report.negative_shares,
                    correlation_id=correlation_id,
                )

        return distribution

    async def _store(self, write, job: JobRecord, correlation_id: UUID) -> None:
        try:
            await write(job)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"job_id": str(job.id)},
                    correlation_id=correlation_id,
                )
            raise

    def reconcile(self, distribution: DistributionResult) -> ReconciliationReport:
        """Check a distribution against the configured tolerance."""
        return reconcile(distribution, self._settings.app.reconciliation_tolerance)

    async def calculate(
        self,
        request: JobRequest,
        correlation_id: Optional[UUID] = None,
    ) -> DistributionResult:
        """
        Preview the distribution for a request without saving anything.

        Raises:
            JobValidationError: If the request fails schema validation
        """
        correlation_id = correlation_id or create_correlation_id()
        request = self._with_defaults(request)
        await self._validate(request, None, correlation_id)
        return await self._compute(request, correlation_id)

    async def create_job(
        self,
        owner_id: str,
        request: JobRequest,
        correlation_id: Optional[UUID] = None,
    ) -> JobRecord:
        """
        Validate, compute and store a new job.

        Raises:
            JobValidationError: If the request fails schema validation
        """
        correlation_id = correlation_id or create_correlation_id()
        request = self._with_defaults(request)
        await self._validate(request, owner_id, correlation_id)

        distribution = await self._compute(request, correlation_id)
        job = JobRecord(
            owner_id=owner_id,
            request=request,
            distribution=distribution,
        )
        await self._store(self._storage.save_job, job, correlation_id)
        logger.info("job_created", job_id=str(job.id), kind=distribution.kind.value)

        if self._audit_logger:
            await self._audit_logger.log_job_created(
                job_id=job.id,
                owner_id=owner_id,
                project_name=request.project_name,
                payment_amount=request.payment_amount,
                correlation_id=correlation_id,
            )

        return job

    async def update_job(
        self,
        owner_id: str,
        job_id: UUID,
        request: JobRequest,
        correlation_id: Optional[UUID] = None,
    ) -> JobRecord:
        """
        Recompute a job from new inputs and replace the stored record.

        The id and creation time are kept; everything else comes from
        the new request and a fresh engine run.

        Raises:
            NotFoundError: If the owner has no such job
            JobValidationError: If the request fails schema validation
        """
        correlation_id = correlation_id or create_correlation_id()
        existing = await self.get_job(owner_id, job_id)

        request = self._with_defaults(request)
        await self._validate(request, owner_id, correlation_id)
        distribution = await self._compute(request, correlation_id)

        job = JobRecord(
            id=existing.id,
            owner_id=owner_id,
            request=request,
            distribution=distribution,
            created_at=existing.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        await self._store(self._storage.replace_job, job, correlation_id)
        logger.info("job_updated", job_id=str(job.id), kind=distribution.kind.value)

        if self._audit_logger:
            await self._audit_logger.log_job_updated(
                job_id=job.id,
                owner_id=owner_id,
                previous=existing.distribution.to_flat_dict(),
                current=distribution.to_flat_dict(),
                correlation_id=correlation_id,
            )

        return job

    async def get_job(self, owner_id: str, job_id: UUID) -> JobRecord:
        """
        Raises:
            NotFoundError: If the owner has no such job
        """
        job = await self._storage.get_job(owner_id, job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")
        return job

    async def delete_job(
        self,
        owner_id: str,
        job_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Raises:
            NotFoundError: If the owner has no such job
        """
        correlation_id = correlation_id or create_correlation_id()
        deleted = await self._storage.delete_job(owner_id, job_id)
        if not deleted:
            raise NotFoundError(f"Job not found: {job_id}")
        logger.info("job_deleted", job_id=str(job_id))

        if self._audit_logger:
            await self._audit_logger.log_job_deleted(
                job_id=job_id,
                owner_id=owner_id,
                correlation_id=correlation_id,
            )

    async def list_jobs(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
        page: int = 1,
        limit: int = 50,
    ) -> JobPage:
        return await self._queries.list_page(
            owner_id,
            search=search,
            frequency=frequency,
            page=page,
            limit=limit,
        )

    async def stats(
        self,
        owner_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> JobStats:
        stats = await self._queries.stats(owner_id)
        if self._audit_logger:
            await self._audit_logger.log_stats_queried(
                owner_id=owner_id,
                total_jobs=stats.total_jobs,
                correlation_id=correlation_id,
            )
        return stats

    async def earnings_by_person(self, owner_id: str) -> dict[str, float]:
        return await self._queries.earnings_by_person(owner_id)


def create_app_components(
    storage: Optional[JobStorageInterface] = None,
) -> tuple[JobLedger, AuditLogger]:
    """
    Factory function to create the application components.

    Args:
        storage: Job storage to use. Defaults to in-memory storage,
                 with audit events kept in memory as well.

    Returns:
        (ledger, audit_logger)
    """
    audit_logger = AuditLogger(InMemoryAuditStorage())
    ledger = JobLedger(
        storage=storage or InMemoryJobStorage(),
        audit_logger=audit_logger,
    )
    return ledger, audit_logger
