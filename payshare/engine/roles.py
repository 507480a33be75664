"""
Role and Currency Rules Shared by Both Engines

A role is "distinct" when its holder is a real, different person:
the trimmed name is non-empty and not equal to the trimmed working
developer name. Only trimming is applied; case and inner whitespace
are significant.

The local currency exists for input and display only. Every share is
computed in the reference currency.
"""

from payshare.models.job import RoleAssignment, RoleDistinctness


def is_distinct(holder: str, working_dev: str) -> bool:
    """True if `holder` is someone other than the working developer."""
    name = holder.strip()
    return bool(name) and name != working_dev.strip()


def resolve_distinctness(roles: RoleAssignment) -> RoleDistinctness:
    """Decide once which optional roles earn a share."""
    return RoleDistinctness(
        job_hunter_distinct=is_distinct(roles.job_hunter, roles.working_dev),
        communicator_distinct=is_distinct(roles.communicator, roles.working_dev),
    )


def to_reference(local_amount: float, conversion_rate: float) -> float:
    """Convert a local-currency amount into reference currency."""
    return local_amount / conversion_rate


def to_local(reference_amount: float, conversion_rate: float) -> float:
    """Mirror a reference-currency amount in local currency."""
    return reference_amount * conversion_rate
