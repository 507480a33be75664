"""
Core Data Models for PayShare

These models define the schemas for everything flowing through the system:
1. The people on a job (role assignment) and its interns
2. The policy a payment is split under
3. The computed distribution
4. The stored job record

DESIGN DECISION: Money is a plain float in the reference currency.
Every share is a complementary subtraction from the payment, so the
breakdown closes back to the payment up to floating-point rounding.
Engine inputs and outputs are frozen so a computed distribution can
never be patched after the fact.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Frequency(str, Enum):
    """How often the client pays for the job."""
    ONE_TIME = "one-time"
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


class InternPaymentMode(str, Enum):
    """
    How an intern's cut is stated.

    FIXED amounts are entered in local currency and converted.
    PERCENTAGE is taken from the developer's pre-intern share.
    """
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class DistributionKind(str, Enum):
    """Which engine produced a distribution."""
    BASIC = "basic"
    ADVANCED = "advanced"


# =============================================================================
# PEOPLE
# =============================================================================

class RoleDistinctness(BaseModel):
    """
    Which optional roles are held by someone other than the working developer.

    Computed once per calculation and threaded through the engines,
    so the string comparison lives in exactly one place.
    """
    model_config = ConfigDict(frozen=True)

    job_hunter_distinct: bool = False
    communicator_distinct: bool = False

    @property
    def solo(self) -> bool:
        """The working developer did everything."""
        return not (self.job_hunter_distinct or self.communicator_distinct)


class RoleAssignment(BaseModel):
    """
    The people involved in a job.

    Optional roles may be blank; a blank role falls back to the
    working developer for display and earns nothing.
    """
    model_config = ConfigDict(frozen=True)

    working_dev: str = Field(
        ...,
        description="Developer who did the work (required, non-blank)"
    )
    job_hunter: str = Field(
        default="",
        description="Person who found the job"
    )
    communicator: str = Field(
        default="",
        description="Person who handled client communication"
    )

    @field_validator("job_hunter", "communicator", mode="before")
    @classmethod
    def none_as_blank(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @property
    def effective_job_hunter(self) -> str:
        return self.job_hunter.strip() or self.working_dev.strip()

    @property
    def effective_communicator(self) -> str:
        return self.communicator.strip() or self.working_dev.strip()


class Intern(BaseModel):
    """An intern paid out of the working developer's share."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(
        ...,
        description="Intern name"
    )
    mode: InternPaymentMode = Field(
        ...,
        description="Fixed local-currency amount or percentage"
    )
    local_amount: float = Field(
        default=0.0,
        description="Amount in local currency (fixed mode)"
    )
    percentage: float = Field(
        default=0.0,
        description="Percent of the pre-intern developer share (percentage mode)"
    )


# =============================================================================
# POLICIES
# =============================================================================

class BasicPolicy(BaseModel):
    """
    Fixed split used when no advanced policy is given.

    All rates are fractions of the total payment except
    communicator_rate, which applies to the developer's share.
    developer_rate_with_job_hunter is its own constant and replaces
    the developer base outright when a job hunter is paid.
    """
    model_config = ConfigDict(frozen=True)

    company_rate: float = 0.30
    remaining_rate: float = 0.70
    job_hunter_rate: float = 0.05
    developer_rate_with_job_hunter: float = 0.65
    communicator_rate: float = 0.10


class AdvancedPolicy(BaseModel):
    """
    Configurable split.

    Company and developer percentages are of the total payment.
    Job hunter and communicator percentages are of the developer base.
    Company + developer is NOT required to sum to 100.
    """
    model_config = ConfigDict(frozen=True)

    company_percentage: float = Field(default=30.0, ge=0, le=100)
    developer_percentage: float = Field(default=70.0, ge=0, le=100)
    job_hunter_percentage: float = Field(default=5.0, ge=0, le=100)
    communicator_percentage: float = Field(default=10.0, ge=0, le=100)


# =============================================================================
# DISTRIBUTION OUTPUT
# =============================================================================

class InternShare(BaseModel):
    """One intern's deduction, for receipts and exports."""
    model_config = ConfigDict(frozen=True)

    name: str
    mode: InternPaymentMode
    amount: float = Field(
        ...,
        description="Deduction in reference currency"
    )
    local_amount: float = Field(
        ...,
        description="Entered amount for fixed mode, mirrored amount otherwise"
    )


class DistributionResult(BaseModel):
    """
    How one payment is split.

    All amounts are in reference currency. working_dev is the final
    share after every deduction.
    """
    model_config = ConfigDict(frozen=True)

    kind: DistributionKind
    company: float
    working_dev: float
    job_hunter: float = 0.0
    communicator: float = 0.0
    intern: float = 0.0
    total: float = Field(
        ...,
        description="The payment amount this distribution splits"
    )
    intern_shares: tuple[InternShare, ...] = ()

    @property
    def allocated_total(self) -> float:
        """Sum of every share handed out."""
        return (
            self.company
            + self.working_dev
            + self.job_hunter
            + self.communicator
            + self.intern
        )

    def to_flat_dict(self) -> dict[str, float]:
        """
        Flat role -> amount mapping for persistence.

        The intern total only appears for advanced distributions.
        """
        flat = {
            "company": self.company,
            "workingDev": self.working_dev,
            "jobHunter": self.job_hunter,
            "communicator": self.communicator,
        }
        if self.kind == DistributionKind.ADVANCED:
            flat["intern"] = self.intern
        flat["total"] = self.total
        return flat


class ReconciliationReport(BaseModel):
    """Whether a distribution adds back up to its payment."""

    expected_total: float
    allocated_total: float
    unallocated: float = Field(
        ...,
        description="expected - allocated; positive means money left over"
    )
    is_balanced: bool
    negative_shares: list[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return self.is_balanced and not self.negative_shares


# =============================================================================
# JOBS
# =============================================================================

class JobRequest(BaseModel):
    """
    Everything a caller supplies to create or update a job.

    A request with a policy, or with `advanced` set, uses the advanced
    engine; an advanced request without a policy is split by the
    configured default policy. Basic requests take no interns.
    A missing conversion rate is filled from configuration.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    project_name: str = Field(
        ...,
        description="Name of the project"
    )
    payment_amount: float = Field(
        ...,
        description="Payment in reference currency"
    )
    conversion_rate: Optional[float] = Field(
        default=None,
        description="Local currency units per reference unit"
    )
    frequency: Frequency = Field(
        default=Frequency.ONE_TIME,
        description="Payment frequency"
    )
    roles: RoleAssignment
    advanced: bool = Field(
        default=False,
        description="Use the advanced engine even without an explicit policy"
    )
    policy: Optional[AdvancedPolicy] = None
    interns: tuple[Intern, ...] = ()

    @property
    def kind(self) -> DistributionKind:
        if self.policy is None and not self.advanced:
            return DistributionKind.BASIC
        return DistributionKind.ADVANCED


class JobRecord(BaseModel):
    """
    A stored job.

    The distribution is always the engine's output for `request`;
    updates replace both together.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique job ID"
    )
    owner_id: str = Field(
        ...,
        min_length=1,
        description="Principal that created the job"
    )
    request: JobRequest
    distribution: DistributionResult
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="When the job was first recorded"
    )
    updated_at: Optional[datetime] = None

    @property
    def project_name(self) -> str:
        return self.request.project_name

    @property
    def payment_amount(self) -> float:
        return self.request.payment_amount


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, ranges)
    Stage 2: Semantic validation (policy sanity, negative shares)
    """

    validated_at: datetime = Field(
        default_factory=_utcnow
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# QUERY MODELS
# =============================================================================

class JobPage(BaseModel):
    """One page of job history, newest first."""

    jobs: list[JobRecord] = Field(default_factory=list)
    page: int = Field(ge=1)
    pages: int = Field(ge=0)
    total: int = Field(ge=0)


class JobStats(BaseModel):
    """Aggregate figures over an owner's jobs."""

    total_jobs: int = Field(default=0, ge=0)
    total_revenue: float = 0.0
    total_company_earnings: float = 0.0
    total_developer_earnings: float = 0.0
    unique_developers: int = Field(default=0, ge=0)
    average_job_value: float = 0.0
