"""
Advanced Distribution Engine

Configurable split:
1. Company and developer base are percentages of the total payment.
2. Job hunter and communicator are percentages of the developer base,
   paid only to distinct people.
3. Interns are paid from what the developer has left. Each intern's cut
   is computed against that same pre-intern amount; cuts are summed,
   never cascaded, and subtracted once.

Fixed intern amounts are entered in local currency and converted at the
job's rate. Nothing here prevents a negative developer share when
deductions exceed the base; the validator warns about it instead.
"""

from collections.abc import Sequence

from payshare.engine.roles import resolve_distinctness, to_local, to_reference
from payshare.models.job import (
    AdvancedPolicy,
    DistributionKind,
    DistributionResult,
    Intern,
    InternPaymentMode,
    InternShare,
    RoleAssignment,
    RoleDistinctness,
)


def intern_deduction(
    intern: Intern,
    developer_amount: float,
    conversion_rate: float,
) -> float:
    """One intern's cut in reference currency."""
    if intern.mode == InternPaymentMode.FIXED:
        if not intern.local_amount:
            return 0.0
        return to_reference(intern.local_amount, conversion_rate)
    if not intern.percentage:
        return 0.0
    return developer_amount * intern.percentage / 100


def intern_breakdown(
    interns: Sequence[Intern],
    developer_amount: float,
    conversion_rate: float,
) -> tuple[InternShare, ...]:
    """
    Per-intern shares for receipts, skipping anyone whose cut is not positive.

    Fixed-mode shares keep the local amount that was entered;
    percentage-mode shares mirror their amount into local currency.
    """
    shares = []
    for intern in interns:
        amount = intern_deduction(intern, developer_amount, conversion_rate)
        if amount <= 0:
            continue
        if intern.mode == InternPaymentMode.FIXED:
            local_amount = intern.local_amount
        else:
            local_amount = to_local(amount, conversion_rate)
        shares.append(InternShare(
            name=intern.name,
            mode=intern.mode,
            amount=amount,
            local_amount=local_amount,
        ))
    return tuple(shares)


def advanced_shares(
    payment_amount: float,
    policy: AdvancedPolicy,
    distinctness: RoleDistinctness,
    conversion_rate: float,
    interns: Sequence[Intern] = (),
) -> DistributionResult:
    """Split a payment under an advanced policy for a precomputed role decision."""
    company = payment_amount * policy.company_percentage / 100
    dev_base = payment_amount * policy.developer_percentage / 100

    job_hunter = 0.0
    if distinctness.job_hunter_distinct:
        job_hunter = dev_base * policy.job_hunter_percentage / 100

    communicator = 0.0
    if distinctness.communicator_distinct:
        communicator = dev_base * policy.communicator_percentage / 100

    developer_amount = dev_base - job_hunter - communicator

    total_intern = 0.0
    for intern in interns:
        total_intern += intern_deduction(intern, developer_amount, conversion_rate)

    return DistributionResult(
        kind=DistributionKind.ADVANCED,
        company=company,
        working_dev=developer_amount - total_intern,
        job_hunter=job_hunter,
        communicator=communicator,
        intern=total_intern,
        total=payment_amount,
        intern_shares=intern_breakdown(interns, developer_amount, conversion_rate),
    )


def compute_advanced(
    payment_amount: float,
    policy: AdvancedPolicy,
    roles: RoleAssignment,
    conversion_rate: float,
    interns: Sequence[Intern] = (),
) -> DistributionResult:
    """
    Split a payment under a caller-supplied advanced policy.

    Preconditions (checked by callers, not here):
        payment_amount > 0, percentages within [0, 100], and
        conversion_rate > 0 whenever an intern is paid a fixed amount.

    Args:
        payment_amount: Payment in reference currency
        policy: Percentages to split by
        roles: The people on the job
        conversion_rate: Local units per reference unit
        interns: Ordered interns paid from the developer's share

    Returns:
        DistributionResult with the intern total and per-intern shares
    """
    return advanced_shares(
        payment_amount,
        policy,
        resolve_distinctness(roles),
        conversion_rate,
        interns=interns,
    )
