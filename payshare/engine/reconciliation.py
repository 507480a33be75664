"""
Sum Reconciliation

Checks that a distribution hands out exactly the payment it was computed
for. Both engines build shares as complementary subtractions, so a basic
distribution always balances up to float rounding. An advanced policy
whose company and developer percentages do not sum to 100 leaves money
unallocated (or over-allocated); that is reported, not corrected.
"""

import math

from payshare.models.job import DistributionResult, ReconciliationReport


DEFAULT_TOLERANCE = 1e-9

_SHARE_FIELDS = ("company", "working_dev", "job_hunter", "communicator", "intern")


def reconcile(
    result: DistributionResult,
    tolerance: float = DEFAULT_TOLERANCE,
) -> ReconciliationReport:
    """
    Compare the sum of all shares with the payment.

    The tolerance is absolute, scaled by the payment when it exceeds 1.
    """
    allocated = result.allocated_total
    scale = max(1.0, abs(result.total))
    balanced = math.isclose(allocated, result.total, rel_tol=0.0, abs_tol=tolerance * scale)
    negative = [name for name in _SHARE_FIELDS if getattr(result, name) < 0]
    return ReconciliationReport(
        expected_total=result.total,
        allocated_total=allocated,
        unallocated=result.total - allocated,
        is_balanced=balanced,
        negative_shares=negative,
    )


def share_percentage(amount: float, total: float) -> float:
    """Share of the total as a percentage (0 for a zero total)."""
    if not total:
        return 0.0
    return amount / total * 100


def format_percentage(amount: float, total: float) -> str:
    """Percentage label with one decimal, e.g. '58.5%'."""
    return f"{share_percentage(amount, total):.1f}%"
