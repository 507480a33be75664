"""
Distribution Breakdown

Turns a DistributionResult into rows ready for a table or receipt:
who gets what, in both currencies, with a share-of-total percentage.

Rows for the job hunter and communicator only appear when they are paid.
Interns appear individually, in the order they were entered.
"""

from pydantic import BaseModel

from payshare.engine.reconciliation import format_percentage
from payshare.engine.roles import to_local
from payshare.models.job import DistributionResult, RoleAssignment


class BreakdownRow(BaseModel):
    """One line of a distribution table."""

    label: str
    person: str
    amount: float
    local_amount: float
    percentage: str


def _row(label: str, person: str, amount: float, total: float, rate: float) -> BreakdownRow:
    return BreakdownRow(
        label=label,
        person=person,
        amount=amount,
        local_amount=to_local(amount, rate),
        percentage=format_percentage(amount, total),
    )


def build_breakdown(
    result: DistributionResult,
    roles: RoleAssignment,
    conversion_rate: float,
) -> list[BreakdownRow]:
    """
    Lay out a distribution as display rows.

    Args:
        result: Computed distribution
        roles: The people on the job (blank roles show the working developer)
        conversion_rate: Local units per reference unit
    """
    total = result.total
    rows = [
        _row("Company Share", "Company", result.company, total, conversion_rate),
        _row("Working Developer", roles.working_dev.strip(), result.working_dev, total, conversion_rate),
    ]
    if result.job_hunter > 0:
        rows.append(_row(
            "Job Hunter Fee", roles.effective_job_hunter, result.job_hunter, total, conversion_rate
        ))
    if result.communicator > 0:
        rows.append(_row(
            "Communication Fee", roles.effective_communicator, result.communicator, total, conversion_rate
        ))
    for share in result.intern_shares:
        rows.append(BreakdownRow(
            label="Intern Payment",
            person=share.name,
            amount=share.amount,
            local_amount=share.local_amount,
            percentage=format_percentage(share.amount, total),
        ))
    return rows
