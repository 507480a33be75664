"""
Basic Distribution Engine

Fixed split. The company always takes 30% and the working developer
keeps whatever is left of the other 70% after:
- the job hunter's 5% of the total (only if a distinct person), and
- the communicator's 10% of the developer's share (only if distinct).

When a job hunter is paid the developer base becomes a flat 65% of the
total. That constant replaces the base; it is not derived by subtracting
the job hunter's share from the remaining 70%.
"""

from typing import Optional

from payshare.engine.roles import resolve_distinctness
from payshare.models.job import (
    BasicPolicy,
    DistributionKind,
    DistributionResult,
    RoleAssignment,
    RoleDistinctness,
)


def basic_shares(
    payment_amount: float,
    distinctness: RoleDistinctness,
    policy: Optional[BasicPolicy] = None,
) -> DistributionResult:
    """Split a payment under the basic policy for a precomputed role decision."""
    policy = policy or BasicPolicy()

    company = payment_amount * policy.company_rate
    remaining = payment_amount * policy.remaining_rate

    if distinctness.solo:
        return DistributionResult(
            kind=DistributionKind.BASIC,
            company=company,
            working_dev=remaining,
            total=payment_amount,
        )

    dev_base = remaining
    job_hunter = 0.0
    if distinctness.job_hunter_distinct:
        job_hunter = payment_amount * policy.job_hunter_rate
        dev_base = payment_amount * policy.developer_rate_with_job_hunter

    communicator = 0.0
    working_dev = dev_base
    if distinctness.communicator_distinct:
        communicator = dev_base * policy.communicator_rate
        working_dev = dev_base - communicator

    return DistributionResult(
        kind=DistributionKind.BASIC,
        company=company,
        working_dev=working_dev,
        job_hunter=job_hunter,
        communicator=communicator,
        total=payment_amount,
    )


def compute_basic(
    payment_amount: float,
    roles: RoleAssignment,
    policy: Optional[BasicPolicy] = None,
) -> DistributionResult:
    """
    Split a payment under the fixed basic policy.

    Preconditions (checked by callers, not here):
        payment_amount > 0 and roles.working_dev is non-blank.

    Blank optional roles and roles held by the working developer
    are valid and simply earn nothing.
    """
    return basic_shares(payment_amount, resolve_distinctness(roles), policy)
