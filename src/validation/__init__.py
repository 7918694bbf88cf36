"""Month record validation package."""

from src.validation.validator import (
    ExpenseDraft,
    MonthRecordDraft,
    MonthRecordValidator,
    RecordValidationError,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "ExpenseDraft",
    "MonthRecordDraft",
    "MonthRecordValidator",
    "RecordValidationError",
    "ValidationIssue",
    "ValidationResult",
]
