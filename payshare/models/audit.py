"""
Audit Models for PayShare

Every significant action on a job is logged for audit purposes.
This provides:
1. Traceability of who recorded or changed which job
2. Debugging information when a distribution looks wrong
3. A record of validation failures and reconciliation mismatches

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Calculation
    DISTRIBUTION_COMPUTED = "distribution_computed"
    RECONCILIATION_MISMATCH = "reconciliation_mismatch"
    NEGATIVE_SHARE_DETECTED = "negative_share_detected"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    JOB_CREATED = "job_created"
    JOB_UPDATED = "job_updated"
    JOB_DELETED = "job_deleted"

    # Queries
    STATS_QUERIED = "stats_queried"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'job', 'stats')"
    )
    entity_id: Optional[UUID] = None
    owner_id: Optional[str] = Field(
        default=None,
        description="Principal the entity belongs to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one job update)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "owner_id": self.owner_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to a row of strings for tabular audit storage.

        Columns:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         owner_id, correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            self.owner_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.job_created(job_id, owner_id, project, amount, correlation_id)
    """

    @staticmethod
    def distribution_computed(
        kind: str,
        payment_amount: float,
        shares: dict[str, float],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISTRIBUTION_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="distribution",
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} distribution computed for {payment_amount:,.2f}",
            details={
                "kind": kind,
                "shares": shares,
            },
        )

    @staticmethod
    def reconciliation_mismatch(
        expected: float,
        allocated: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_MISMATCH,
            severity=AuditSeverity.WARNING,
            entity_type="distribution",
            correlation_id=correlation_id,
            description=(
                f"Distribution allocates {allocated:,.2f} of {expected:,.2f}"
            ),
            details={
                "expected_total": expected,
                "allocated_total": allocated,
                "unallocated": expected - allocated,
            },
        )

    @staticmethod
    def negative_share_detected(
        shares: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NEGATIVE_SHARE_DETECTED,
            severity=AuditSeverity.WARNING,
            entity_type="distribution",
            correlation_id=correlation_id,
            description=f"Negative share for: {', '.join(shares)}",
            details={"shares": shares},
        )

    @staticmethod
    def validation_failed(
        stage: str,
        issues: list[dict],
        owner_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="job",
            owner_id=owner_id,
            correlation_id=correlation_id,
            description=f"{stage.capitalize()} validation failed with {len(issues)} issues",
            details={
                "stage": stage,
                "issues": issues,
            },
        )

    @staticmethod
    def job_created(
        job_id: UUID,
        owner_id: str,
        project_name: str,
        payment_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOB_CREATED,
            entity_type="job",
            entity_id=job_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
            description=f"Job recorded: {project_name} - {payment_amount:,.2f}",
            details={
                "project_name": project_name,
                "payment_amount": payment_amount,
            },
        )

    @staticmethod
    def job_updated(
        job_id: UUID,
        owner_id: str,
        previous: dict[str, float],
        current: dict[str, float],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOB_UPDATED,
            entity_type="job",
            entity_id=job_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
            description="Job recomputed and replaced",
            details={
                "previous_distribution": previous,
                "distribution": current,
            },
        )

    @staticmethod
    def job_deleted(
        job_id: UUID,
        owner_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOB_DELETED,
            entity_type="job",
            entity_id=job_id,
            owner_id=owner_id,
            correlation_id=correlation_id,
            description="Job deleted",
        )

    @staticmethod
    def stats_queried(
        owner_id: str,
        total_jobs: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATS_QUERIED,
            severity=AuditSeverity.DEBUG,
            entity_type="stats",
            owner_id=owner_id,
            correlation_id=correlation_id,
            description=f"Stats computed over {total_jobs} jobs",
            details={"total_jobs": total_jobs},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
