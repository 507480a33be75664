"""
Distribution Engines

Pure functions from (payment, roles, policy) to a DistributionResult.
The engines do no I/O, no logging and keep no shared state, so they are
safe to call from anywhere, any number of times, with identical results.
Only the dispatch below reads configured defaults.
"""

from typing import Optional

from payshare.config import get_settings
from payshare.engine.advanced import (
    advanced_shares,
    compute_advanced,
    intern_breakdown,
    intern_deduction,
)
from payshare.engine.basic import basic_shares, compute_basic
from payshare.engine.reconciliation import (
    DEFAULT_TOLERANCE,
    format_percentage,
    reconcile,
    share_percentage,
)
from payshare.engine.roles import (
    is_distinct,
    resolve_distinctness,
    to_local,
    to_reference,
)
from payshare.models.job import DistributionKind, DistributionResult, JobRequest


def compute_distribution(
    request: JobRequest,
    conversion_rate: Optional[float] = None,
) -> DistributionResult:
    """
    Run the engine a job request calls for.

    An advanced request goes to the advanced engine, anything else to
    the basic one. An advanced request without its own policy is split
    by the configured default policy. The rate is `conversion_rate` if
    given, else the request's own, else the configured default.
    """
    if request.kind == DistributionKind.BASIC:
        return compute_basic(request.payment_amount, request.roles)

    rate = conversion_rate if conversion_rate is not None else request.conversion_rate
    policy = request.policy
    if rate is None or policy is None:
        defaults = get_settings().policy
        if rate is None:
            rate = defaults.conversion_rate
        if policy is None:
            policy = defaults.default_policy()

    return compute_advanced(
        request.payment_amount,
        policy,
        request.roles,
        rate,
        interns=request.interns,
    )


__all__ = [
    "DEFAULT_TOLERANCE",
    "advanced_shares",
    "basic_shares",
    "compute_advanced",
    "compute_basic",
    "compute_distribution",
    "format_percentage",
    "intern_breakdown",
    "intern_deduction",
    "is_distinct",
    "reconcile",
    "resolve_distinctness",
    "share_percentage",
    "to_local",
    "to_reference",
]
