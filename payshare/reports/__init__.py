"""Display reports package."""

from payshare.reports.breakdown import BreakdownRow, build_breakdown

__all__ = ["BreakdownRow", "build_breakdown"]
