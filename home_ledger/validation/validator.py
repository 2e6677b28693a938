"""
Request Validation

DESIGN DECISION: Every user-submitted request is checked before it reaches
the ledger, and ALL problems are reported together rather than stopping at
the first one. The ledger then only has to enforce what depends on the
current balances (insufficient funds, remaining debt).

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the input.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from home_ledger.models.ledger import (
    Currency,
    TransactionRequest,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


def _result(issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
    )


def _positive_amount(
    field: str,
    value: Optional[Decimal],
    label: str,
) -> Optional[ValidationIssue]:
    if value is None:
        return ValidationIssue(
            field=field,
            issue_type="missing",
            message=f"{label} is required",
            suggested_fix="Enter an amount greater than zero",
        )
    if not value.is_finite() or value <= 0:
        return ValidationIssue(
            field=field,
            issue_type="invalid_value",
            message=f"{label} must be greater than zero",
            suggested_fix="Enter an amount greater than zero",
        )
    return None


class TransactionValidator:
    """
    Validates ledger requests.

    Each validate_* method returns a ValidationResult; the ledger turns
    an invalid result into a ValidationError.
    """

    def validate_request(self, request: TransactionRequest) -> ValidationResult:
        """
        Check a create/edit request.

        Checks:
        - Positive amount
        - Non-empty description
        - Date present
        - Account fields required by the transaction type
        """
        issues = []

        amount_issue = _positive_amount("amount", request.amount, "Amount")
        if amount_issue:
            issues.append(amount_issue)

        if not request.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="A description is required",
                suggested_fix="Describe what the transaction was for",
            ))

        if request.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="A date is required",
            ))

        if request.type == TransactionType.TRANSFER:
            if not request.from_account_id or not request.to_account_id:
                issues.append(ValidationIssue(
                    field="to_account_id",
                    issue_type="missing",
                    message="A transfer needs both a source and a destination account",
                ))
            elif request.from_account_id == request.to_account_id:
                issues.append(ValidationIssue(
                    field="to_account_id",
                    issue_type="invalid_value",
                    message="A transfer needs two different accounts",
                    suggested_fix="Pick a different destination account",
                ))

        if request.type == TransactionType.EXPENSE and not request.source_account_id:
            issues.append(ValidationIssue(
                field="source_account_id",
                issue_type="missing",
                message="An expense needs the account it is paid from",
            ))

        return _result(issues)

    def validate_settlement(
        self,
        amount_paid: Decimal,
        remaining: Decimal,
        debt_currency: Currency,
        account_currency: Currency,
    ) -> ValidationResult:
        """Check a debt settlement against the debt's remaining amount."""
        issues = []

        amount_issue = _positive_amount("amount_paid", amount_paid, "Amount paid")
        if amount_issue:
            issues.append(amount_issue)
        elif amount_paid > remaining:
            issues.append(ValidationIssue(
                field="amount_paid",
                issue_type="invalid_value",
                message=f"Amount paid ({amount_paid}) is more than the remaining debt ({remaining})",
                suggested_fix=f"Pay at most {remaining}",
            ))

        if account_currency != debt_currency:
            issues.append(ValidationIssue(
                field="target_account_id",
                issue_type="mismatch",
                message=(
                    f"A {debt_currency.value} debt can only be settled from a "
                    f"{debt_currency.value} account"
                ),
            ))

        return _result(issues)

    def validate_exchange(
        self,
        amount_to_sell: Decimal,
        from_currency: Currency,
        to_currency: Currency,
        rate: Decimal,
        amount_to_receive: Decimal,
    ) -> ValidationResult:
        """Check a currency exchange request."""
        issues = []

        for field, value, label in (
            ("amount_to_sell", amount_to_sell, "Amount to sell"),
            ("rate", rate, "Exchange rate"),
            ("amount_to_receive", amount_to_receive, "Amount to receive"),
        ):
            issue = _positive_amount(field, value, label)
            if issue:
                issues.append(issue)

        if from_currency == to_currency:
            issues.append(ValidationIssue(
                field="to_currency",
                issue_type="mismatch",
                message="Cannot exchange a currency for itself",
            ))

        return _result(issues)

    def validate_goal(
        self,
        description: str,
        target_amount: Optional[Decimal],
        target_date: Optional[datetime],
        now: datetime,
    ) -> ValidationResult:
        """Check a saving goal: description, positive target, future date."""
        issues = []

        if not description or not description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="A goal description is required",
            ))

        amount_issue = _positive_amount("target_amount", target_amount, "Target amount")
        if amount_issue:
            issues.append(amount_issue)

        if target_date is None:
            issues.append(ValidationIssue(
                field="target_date",
                issue_type="missing",
                message="A target date is required",
            ))
        elif target_date <= now:
            issues.append(ValidationIssue(
                field="target_date",
                issue_type="invalid_value",
                message="The target date must be in the future",
            ))

        return _result(issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
