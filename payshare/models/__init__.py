"""
Data Models Package

This package contains all Pydantic models used in PayShare.
All data flowing through the system must conform to these schemas.
"""

from payshare.models.job import (
    AdvancedPolicy,
    BasicPolicy,
    DistributionKind,
    DistributionResult,
    Frequency,
    Intern,
    InternPaymentMode,
    InternShare,
    JobPage,
    JobRecord,
    JobRequest,
    JobStats,
    ReconciliationReport,
    RoleAssignment,
    RoleDistinctness,
    ValidationIssue,
    ValidationResult,
)
from payshare.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Job models
    "AdvancedPolicy",
    "BasicPolicy",
    "DistributionKind",
    "DistributionResult",
    "Frequency",
    "Intern",
    "InternPaymentMode",
    "InternShare",
    "JobPage",
    "JobRecord",
    "JobRequest",
    "JobStats",
    "ReconciliationReport",
    "RoleAssignment",
    "RoleDistinctness",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
