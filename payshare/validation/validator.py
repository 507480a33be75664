"""
Two-Stage Job Validation

DESIGN DECISION: The engines assume valid input and never re-check it.
Validation is the caller's job and happens here, in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Required fields present (project name, working developer)
- Amounts positive and finite (payment, conversion rate)
- Intern entries well-formed
- This catches input the engines cannot compute with

STAGE 2 - SEMANTIC VALIDATION:
- Company + developer percentages not summing to 100
- Deductions that would push the developer share below zero
- Unusually large payments
- Interns that would be paid nothing
- These are allowed, but shown to the user as warnings

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to review.
"""

import math
from typing import Optional

from payshare.config import get_settings
from payshare.config.settings import AppSettings
from payshare.engine import compute_distribution, intern_deduction
from payshare.models.job import (
    DistributionKind,
    InternPaymentMode,
    JobRequest,
    ValidationIssue,
    ValidationResult,
)


class JobValidationError(ValueError):
    """Job input failed validation; carries the full result."""

    def __init__(self, result: ValidationResult):
        self.result = result
        errors = [i.message for i in result.issues if i.severity == "error"]
        super().__init__("; ".join(errors) or "Job input is invalid")


def _positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


class JobValidator:
    """
    Validates job requests before they reach an engine.

    Stage 1: Schema validation (blocking errors)
    Stage 2: Semantic validation (warnings only)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        request: JobRequest,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not request.project_name:
            issues.append(ValidationIssue(
                field="project_name",
                issue_type="missing",
                message="Project name is required",
                severity="error",
            ))
        elif len(request.project_name) > self._settings.max_project_name_length:
            issues.append(ValidationIssue(
                field="project_name",
                issue_type="too_long",
                message=(
                    f"Project name cannot exceed "
                    f"{self._settings.max_project_name_length} characters"
                ),
                severity="error",
            ))

        if not _positive(request.payment_amount):
            issues.append(ValidationIssue(
                field="payment_amount",
                issue_type="invalid_value",
                message="Payment amount must be greater than zero",
                severity="error",
            ))

        if request.conversion_rate is None:
            issues.append(ValidationIssue(
                field="conversion_rate",
                issue_type="missing",
                message="Conversion rate is required",
                severity="error",
            ))
        elif not _positive(request.conversion_rate):
            issues.append(ValidationIssue(
                field="conversion_rate",
                issue_type="invalid_value",
                message="Conversion rate must be greater than zero",
                severity="error",
            ))

        if not request.roles.working_dev.strip():
            issues.append(ValidationIssue(
                field="roles.working_dev",
                issue_type="missing",
                message="Working developer name is required",
                severity="error",
            ))

        if request.interns and request.kind == DistributionKind.BASIC:
            issues.append(ValidationIssue(
                field="interns",
                issue_type="not_allowed",
                message="Interns can only be paid under an advanced policy",
                severity="error",
                suggested_fix="Switch to an advanced policy or remove the interns",
            ))

        for index, intern in enumerate(request.interns):
            field = f"interns[{index}]"
            if not intern.name:
                issues.append(ValidationIssue(
                    field=f"{field}.name",
                    issue_type="missing",
                    message=f"Intern {index + 1} needs a name",
                    severity="error",
                ))
            if intern.mode == InternPaymentMode.FIXED:
                if not math.isfinite(intern.local_amount) or intern.local_amount < 0:
                    issues.append(ValidationIssue(
                        field=f"{field}.local_amount",
                        issue_type="invalid_value",
                        message=f"Intern {index + 1} amount cannot be negative",
                        severity="error",
                    ))
            elif not 0 <= intern.percentage <= 100:
                issues.append(ValidationIssue(
                    field=f"{field}.percentage",
                    issue_type="invalid_value",
                    message=f"Intern {index + 1} percentage must be between 0 and 100",
                    severity="error",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        request: JobRequest,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Only runs on schema-valid input, so the engine can be invoked
        to see what the split would look like.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if request.payment_amount > self._settings.max_payment_amount:
            issues.append(ValidationIssue(
                field="payment_amount",
                issue_type="suspicious_value",
                message=f"Payment ({request.payment_amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if request.kind == DistributionKind.ADVANCED:
            policy = request.policy
            if policy is None:
                policy = get_settings().policy.default_policy()
            split = policy.company_percentage + policy.developer_percentage
            if split > 100:
                issues.append(ValidationIssue(
                    field="policy",
                    issue_type="over_allocated",
                    message=(
                        f"Company and developer percentages add up to {split:g}%, "
                        "more than the whole payment"
                    ),
                    severity="warning",
                    suggested_fix="Lower the company or developer percentage",
                ))
            elif split < 100:
                issues.append(ValidationIssue(
                    field="policy",
                    issue_type="under_allocated",
                    message=(
                        f"Company and developer percentages add up to {split:g}%; "
                        "the rest of the payment is not assigned to anyone"
                    ),
                    severity="warning",
                ))

            result = compute_distribution(request)
            developer_before_interns = result.working_dev + result.intern
            if result.working_dev < 0:
                issues.append(ValidationIssue(
                    field="interns",
                    issue_type="negative_share",
                    message=(
                        f"Intern payments ({result.intern:,.2f}) exceed the "
                        f"developer's share ({developer_before_interns:,.2f})"
                    ),
                    severity="warning",
                    suggested_fix="Reduce intern payments",
                ))

            for index, intern in enumerate(request.interns):
                amount = intern_deduction(
                    intern, developer_before_interns, request.conversion_rate
                )
                if amount <= 0:
                    issues.append(ValidationIssue(
                        field=f"interns[{index}]",
                        issue_type="zero_payment",
                        message=f"Intern {intern.name or index + 1} will not be paid anything",
                        severity="warning",
                    ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(self, request: JobRequest) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(request)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(request)
            all_issues.extend(semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Short text summary of validation results."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"  - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"    ({issue.suggested_fix})")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines)
