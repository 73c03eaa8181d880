"""
Transaction Input Validation

Checks what a user typed before it is handed to the ledger.

ERRORS (block saving):
- Empty name (after trimming whitespace)
- Missing, unparseable, zero or negative amount
- Negative monthly target

WARNINGS (shown, but saving is allowed):
- Date further in the future than the configured tolerance
- Amount above the configured sanity limit

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can decide.

The ledger does not call this itself; amount and name are the caller's
responsibility. The models still refuse impossible values.
"""

from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

from savemoney.config import LedgerSettings, get_settings
from savemoney.models.ledger import ValidationIssue, ValidationResult


AmountInput = Union[Decimal, int, float, str, None]


def _parse_amount(amount: AmountInput) -> Optional[Decimal]:
    if amount is None:
        return None
    try:
        return Decimal(str(amount).strip())
    except InvalidOperation:
        return None


class TransactionValidator:
    """Validates transaction and budget-settings input."""

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._clock = clock or datetime.now

    def _result(self, issues: list[ValidationIssue]) -> ValidationResult:
        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
            warnings=[i.message for i in issues if i.severity == "warning"],
        )

    def validate(
        self,
        name: Optional[str],
        amount: AmountInput,
        date: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Validate a transaction form.

        Args:
            name: Display label as typed
            amount: Amount as typed or parsed
            date: Transaction date, if the user picked one

        Returns:
            ValidationResult with all issues found
        """
        issues = []

        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Transaction name is required",
                severity="error",
                suggested_fix="Enter a short description, e.g. 'Lunch'",
            ))

        parsed = _parse_amount(amount)
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif parsed is None or not parsed.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({amount}) is not a number",
                severity="error",
                suggested_fix="Enter digits only",
            ))
        elif parsed <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
        elif parsed > self._settings.max_transaction_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({parsed:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if date is not None:
            tolerance = timedelta(days=self._settings.future_date_tolerance_days)
            latest = self._clock().date() + tolerance
            if date.date() > latest:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Date ({date.date()}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        return self._result(issues)

    def validate_budget_settings(
        self,
        total_balance: AmountInput = None,
        monthly_target: AmountInput = None,
    ) -> ValidationResult:
        """Validate a balance/target edit. Omitted fields are not checked."""
        issues = []

        if total_balance is not None:
            parsed = _parse_amount(total_balance)
            if parsed is None or not parsed.is_finite():
                issues.append(ValidationIssue(
                    field="total_balance",
                    issue_type="invalid_format",
                    message=f"Balance ({total_balance}) is not a number",
                    severity="error",
                ))

        if monthly_target is not None:
            parsed = _parse_amount(monthly_target)
            if parsed is None or not parsed.is_finite():
                issues.append(ValidationIssue(
                    field="monthly_target",
                    issue_type="invalid_format",
                    message=f"Monthly target ({monthly_target}) is not a number",
                    severity="error",
                ))
            elif parsed < 0:
                issues.append(ValidationIssue(
                    field="monthly_target",
                    issue_type="invalid_value",
                    message="Monthly target cannot be negative",
                    severity="error",
                    suggested_fix="Use 0 to turn the budget off",
                ))

        return self._result(issues)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a plain-text summary of validation results.
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
