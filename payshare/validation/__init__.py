"""Input validation package."""

from payshare.validation.validator import JobValidationError, JobValidator

__all__ = ["JobValidationError", "JobValidator"]
