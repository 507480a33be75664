"""
Audit Logger

DESIGN DECISION: Every change to a job is logged.
This provides:
1. Traceability of who recorded what
2. Debugging capability when a split looks wrong
3. A history of replaced distributions (old and new on every update)

The audit logger:
- Is async so it can sit behind any storage backend
- Gracefully handles failures (a failed audit write never fails the job)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from payshare.models.audit import AuditEvent, AuditEventBuilder
from payshare.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("payshare.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_distribution_computed(
        self,
        kind: str,
        payment_amount: float,
        shares: dict[str, float],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.distribution_computed(
            kind=kind,
            payment_amount=payment_amount,
            shares=shares,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_reconciliation_mismatch(
        self,
        expected: float,
        allocated: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a distribution that does not add back up to its payment."""
        event = AuditEventBuilder.reconciliation_mismatch(
            expected=expected,
            allocated=allocated,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_negative_shares(
        self,
        shares: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.negative_share_detected(
            shares=shares,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        stage: str,
        issues: list[dict],
        owner_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        event = AuditEventBuilder.validation_failed(
            stage=stage,
            issues=issues,
            owner_id=owner_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_job_created(
        self,
        job_id: UUID,
        owner_id: str,
        project_name: str,
        payment_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.job_created(
            job_id=job_id,
            owner_id=owner_id,
            project_name=project_name,
            payment_amount=payment_amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_job_updated(
        self,
        job_id: UUID,
        owner_id: str,
        previous: dict[str, float],
        current: dict[str, float],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a recompute-and-replace, keeping both distributions."""
        event = AuditEventBuilder.job_updated(
            job_id=job_id,
            owner_id=owner_id,
            previous=previous,
            current=current,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_job_deleted(
        self,
        job_id: UUID,
        owner_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.job_deleted(
            job_id=job_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_stats_queried(
        self,
        owner_id: str,
        total_jobs: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.stats_queried(
            owner_id=owner_id,
            total_jobs=total_jobs,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new request (e.g., a job update).
    Pass it through all subsequent operations.
    """
    return uuid4()
