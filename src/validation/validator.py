"""
Month Record Validation

DESIGN DECISION: A month record is built from raw form values in two
steps:

STEP 1 - VALIDATE:
- Every expense needs a description (at most 200 characters) and a
  non-negative amount
- Month must come from the fixed vocabulary, year must be an integer
- Admin fee must be numeric
This produces a ValidationResult listing every issue found.

STEP 2 - BUILD:
- Runs validation, raises RecordValidationError if any error was found
- Applies the coercions that are safe by policy: admin fee clamped to
  [0, 100], partners count raised to at least 1 (each reported as a
  warning so nothing is silently changed without a trace)
- Reuses id and created_at when editing, assigns fresh ones otherwise

IMPORTANT: Invalid expenses are never dropped. The whole submit is rejected.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.config import get_settings
from src.models.ledger import (
    MAX_AMOUNT,
    MAX_DESCRIPTION_LENGTH,
    ExpenseItem,
    MonthLabel,
    MonthRecord,
    new_id,
    now_millis,
)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue (e.g. 'expenses[2].description')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'coerced')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a month record draft."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


class RecordValidationError(Exception):
    """The submitted month record is malformed and was not built."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = [issue for issue in issues if issue.severity == "error"]
        messages = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Month record rejected: {messages}")


class ExpenseDraft(BaseModel):
    """Raw values of one expense row of the form."""

    id: Optional[str] = None
    description: Any = ""
    amount: Any = Decimal("0")


class MonthRecordDraft(BaseModel):
    """
    Raw values submitted by the month form.

    Money fields hold amounts already decoded by the currency mask;
    the other fields are left loose so the validator can report them.
    """

    month: Any
    year: Any
    revenue: Any = Decimal("0")
    expenses: list[ExpenseDraft] = Field(default_factory=list)
    admin_fee_percent: Any = None
    partners_count: Any = None


def _to_int(value: Any) -> Optional[int]:
    """Integer value of ``value``, or None when it isn't one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _to_amount(value: Any) -> Optional[Decimal]:
    """Decimal amount of ``value``, or None when it isn't numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        # Formatted strings belong to the currency mask, not here
        return None
    try:
        amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


class MonthRecordValidator:
    """
    Validates month form drafts and builds MonthRecord objects from them.

    Defaults for missing admin fee / partners count come from
    LedgerSettings unless given explicitly.
    """

    def __init__(
        self,
        default_admin_fee_percent: Optional[int] = None,
        default_partners_count: Optional[int] = None,
    ):
        if default_admin_fee_percent is None or default_partners_count is None:
            ledger_settings = get_settings().ledger
            if default_admin_fee_percent is None:
                default_admin_fee_percent = ledger_settings.default_admin_fee_percent
            if default_partners_count is None:
                default_partners_count = ledger_settings.default_partners_count
        self._default_admin_fee = default_admin_fee_percent
        self._default_partners = default_partners_count

    def _check_amount(
        self,
        field: str,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        amount = _to_amount(value)
        if amount is None:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{field} must be a numeric amount",
                severity="error",
            ))
            return None
        if amount < 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="negative",
                message=f"{field} cannot be negative",
                severity="error",
            ))
            return None
        if amount > MAX_AMOUNT:
            issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{field} exceeds the maximum amount {MAX_AMOUNT}",
                severity="error",
            ))
            return None
        if amount != amount.quantize(Decimal("0.01")):
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_precision",
                message=f"{field} has more than two decimal places",
                severity="error",
            ))
            return None
        return amount

    def _resolve_admin_fee(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[int]:
        if value is None or value == "":
            return self._default_admin_fee
        fee = _to_int(value)
        if fee is None:
            issues.append(ValidationIssue(
                field="admin_fee_percent",
                issue_type="invalid_value",
                message="Admin fee must be a whole percentage",
                severity="error",
            ))
            return None
        clamped = min(max(fee, 0), 100)
        if clamped != fee:
            issues.append(ValidationIssue(
                field="admin_fee_percent",
                issue_type="coerced",
                message=f"Admin fee {fee}% clamped to {clamped}%",
                severity="warning",
            ))
        return clamped

    def _resolve_partners(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> int:
        if value is None or value == "":
            return self._default_partners
        partners = _to_int(value)
        if partners is None or partners < 1:
            issues.append(ValidationIssue(
                field="partners_count",
                issue_type="coerced",
                message=f"Partners count {value!r} raised to 1",
                severity="warning",
            ))
            return 1
        return partners

    def _resolve_month(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[MonthLabel]:
        if isinstance(value, MonthLabel):
            return value
        if isinstance(value, str):
            try:
                return MonthLabel(value.strip())
            except ValueError:
                pass
        issues.append(ValidationIssue(
            field="month",
            issue_type="invalid_value",
            message=f"Unknown month: {value!r}",
            severity="error",
        ))
        return None

    def _resolve_year(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[int]:
        year = _to_int(value)
        if year is None or not 1 <= year <= 9999:
            issues.append(ValidationIssue(
                field="year",
                issue_type="invalid_value",
                message=f"Invalid year: {value!r}",
                severity="error",
            ))
            return None
        return year

    def _collect(self, draft: MonthRecordDraft) -> tuple[list[ValidationIssue], dict]:
        """Run every check, returning issues and the resolved field values."""
        issues: list[ValidationIssue] = []

        fields = {
            "month": self._resolve_month(draft.month, issues),
            "year": self._resolve_year(draft.year, issues),
            "revenue": self._check_amount("revenue", draft.revenue, issues),
            "admin_fee_percent": self._resolve_admin_fee(draft.admin_fee_percent, issues),
            "partners_count": self._resolve_partners(draft.partners_count, issues),
        }

        expenses = []
        for index, expense in enumerate(draft.expenses):
            prefix = f"expenses[{index}]"
            description = expense.description
            if not isinstance(description, str) or not description.strip():
                issues.append(ValidationIssue(
                    field=f"{prefix}.description",
                    issue_type="missing",
                    message=f"Expense #{index + 1} needs a description",
                    severity="error",
                ))
                description = None
            elif len(description.strip()) > MAX_DESCRIPTION_LENGTH:
                issues.append(ValidationIssue(
                    field=f"{prefix}.description",
                    issue_type="too_long",
                    message=(
                        f"Expense #{index + 1} description is longer than "
                        f"{MAX_DESCRIPTION_LENGTH} characters"
                    ),
                    severity="error",
                ))
                description = None
            amount = self._check_amount(f"{prefix}.amount", expense.amount, issues)
            expenses.append((expense.id, description, amount))
        fields["expenses"] = expenses

        return issues, fields

    def validate(self, draft: MonthRecordDraft) -> ValidationResult:
        """Check a draft without building anything."""
        issues, _ = self._collect(draft)
        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def build(
        self,
        draft: MonthRecordDraft,
        existing: Optional[MonthRecord] = None,
    ) -> MonthRecord:
        """
        Build a MonthRecord from a draft.

        Args:
            draft: Raw form values
            existing: The record being edited, if any. Its id and
                      created_at are carried over unchanged.

        Raises:
            RecordValidationError: If any error-level issue was found.
        """
        issues, fields = self._collect(draft)
        if any(issue.severity == "error" for issue in issues):
            raise RecordValidationError(issues)

        expenses = [
            ExpenseItem(
                id=expense_id or new_id(),
                description=description,
                amount=amount,
            )
            for expense_id, description, amount in fields["expenses"]
        ]

        return MonthRecord(
            id=existing.id if existing else new_id(),
            created_at=existing.created_at if existing else now_millis(),
            month=fields["month"],
            year=fields["year"],
            revenue=fields["revenue"],
            expenses=expenses,
            admin_fee_percent=fields["admin_fee_percent"],
            partners_count=fields["partners_count"],
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary of a validation result to show next to the form."""
        if result.is_valid and not result.warnings:
            return "All checks passed! The month can be saved."

        lines = []
        if result.has_errors:
            lines.append("Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Adjusted automatically:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
