"""Tests for month record validation and building."""

import pytest
from decimal import Decimal

from src.models.ledger import MonthLabel, MonthRecord
from src.validation import (
    ExpenseDraft,
    MonthRecordDraft,
    MonthRecordValidator,
    RecordValidationError,
)


@pytest.fixture
def validator():
    return MonthRecordValidator(default_admin_fee_percent=35, default_partners_count=2)


def make_draft(**overrides) -> MonthRecordDraft:
    values = dict(
        month="Março",
        year=2024,
        revenue=Decimal("5000.00"),
        expenses=[
            ExpenseDraft(description="Limpeza", amount=Decimal("1200.00")),
            ExpenseDraft(description="Condomínio", amount=Decimal("300.00")),
        ],
    )
    values.update(overrides)
    return MonthRecordDraft(**values)


class TestValidate:
    """Tests for draft validation."""

    def test_valid_draft(self, validator):
        """Test that a complete draft passes."""
        result = validator.validate(make_draft())
        assert result.is_valid is True
        assert result.issues == []

    def test_empty_expense_description(self, validator):
        """Test that an expense without description is an error."""
        draft = make_draft(expenses=[ExpenseDraft(description="   ", amount=Decimal("10"))])
        result = validator.validate(draft)
        assert result.is_valid is False
        assert result.issues[0].field == "expenses[0].description"

    def test_description_too_long(self, validator):
        """Test that an over-long description is an error, not a crash in build()."""
        draft = make_draft(expenses=[ExpenseDraft(description="x" * 201, amount=Decimal("10"))])
        result = validator.validate(draft)
        assert result.is_valid is False
        assert result.issues[0].issue_type == "too_long"
        assert result.issues[0].field == "expenses[0].description"

    def test_description_at_limit(self, validator):
        draft = make_draft(expenses=[ExpenseDraft(description="x" * 200, amount=Decimal("10"))])
        assert validator.validate(draft).is_valid is True
        assert validator.build(draft).expenses[0].description == "x" * 200

    def test_negative_amount(self, validator):
        """Test that negative amounts are errors."""
        result = validator.validate(make_draft(revenue=Decimal("-1")))
        assert result.has_errors
        assert result.issues[0].issue_type == "negative"

    def test_formatted_string_amount(self, validator):
        """Test that masked text is not accepted as an amount."""
        result = validator.validate(make_draft(revenue="1.500,75"))
        assert result.has_errors
        assert result.issues[0].field == "revenue"

    def test_sub_cent_amount(self, validator):
        """Test that amounts with three decimals are errors."""
        result = validator.validate(make_draft(revenue=Decimal("10.001")))
        assert result.issues[0].issue_type == "invalid_precision"

    def test_unknown_month(self, validator):
        """Test that months outside the vocabulary are errors."""
        result = validator.validate(make_draft(month="March"))
        assert result.has_errors
        assert result.issues[0].field == "month"

    def test_invalid_year(self, validator):
        """Test that non-integer years are errors."""
        assert validator.validate(make_draft(year="two thousand")).has_errors
        assert validator.validate(make_draft(year=0)).has_errors

    def test_non_numeric_admin_fee(self, validator):
        """Test that a non-numeric admin fee is an error."""
        result = validator.validate(make_draft(admin_fee_percent="abc"))
        assert result.has_errors
        assert result.issues[0].field == "admin_fee_percent"

    def test_all_issues_reported(self, validator):
        """Test that every problem is listed, not only the first."""
        draft = make_draft(
            month="Nope",
            revenue=Decimal("-5"),
            expenses=[ExpenseDraft(description="", amount=Decimal("-1"))],
        )
        assert validator.validate(draft).error_count == 4


class TestBuild:
    """Tests for building records from drafts."""

    def test_build_new_record(self, validator):
        """Test that a new record gets fresh identity and defaults."""
        record = validator.build(make_draft())
        assert isinstance(record, MonthRecord)
        assert record.month is MonthLabel.MARCH
        assert record.admin_fee_percent == 35
        assert record.partners_count == 2
        assert len(record.expenses) == 2
        assert all(expense.id for expense in record.expenses)

    def test_build_rejects_invalid_draft(self, validator):
        """Test that no record is built when there are errors."""
        draft = make_draft(expenses=[ExpenseDraft(description="", amount=Decimal("10"))])
        with pytest.raises(RecordValidationError) as exc_info:
            validator.build(draft)
        assert len(exc_info.value.issues) == 1
        assert "description" in str(exc_info.value)

    def test_build_rejects_long_description(self, validator):
        draft = make_draft(expenses=[ExpenseDraft(description="x" * 201, amount=Decimal("10"))])
        with pytest.raises(RecordValidationError, match="longer than 200"):
            validator.build(draft)

    def test_build_clamps_admin_fee(self, validator):
        """Test that the admin fee is clamped to [0, 100]."""
        assert validator.build(make_draft(admin_fee_percent=150)).admin_fee_percent == 100
        assert validator.build(make_draft(admin_fee_percent=-5)).admin_fee_percent == 0

    def test_clamping_is_reported(self, validator):
        """Test that clamping shows up as a warning."""
        result = validator.validate(make_draft(admin_fee_percent=150))
        assert result.is_valid is True
        assert result.warnings == ["Admin fee 150% clamped to 100%"]

    def test_build_coerces_partners(self, validator):
        """Test that zero or invalid partners become 1."""
        assert validator.build(make_draft(partners_count=0)).partners_count == 1
        assert validator.build(make_draft(partners_count="x")).partners_count == 1
        assert validator.build(make_draft(partners_count="3")).partners_count == 3

    def test_build_empty_fee_uses_default(self, validator):
        """Test that an empty fee field falls back to the default."""
        assert validator.build(make_draft(admin_fee_percent="")).admin_fee_percent == 35

    def test_build_edit_keeps_identity(self, validator):
        """Test that editing keeps id and created_at."""
        original = validator.build(make_draft())
        edited = validator.build(
            make_draft(revenue=Decimal("6000.00")),
            existing=original,
        )
        assert edited.id == original.id
        assert edited.created_at == original.created_at
        assert edited.revenue == Decimal("6000.00")

    def test_build_keeps_expense_ids(self, validator):
        """Test that existing expense ids are preserved."""
        draft = make_draft(expenses=[ExpenseDraft(id="e-1", description="Luz", amount=Decimal("10"))])
        assert validator.build(draft).expenses[0].id == "e-1"

    def test_settings_defaults(self, monkeypatch):
        """Test that defaults come from LedgerSettings."""
        from src.config import get_settings

        monkeypatch.setenv("LEDGER_DEFAULT_ADMIN_FEE_PERCENT", "20")
        monkeypatch.setenv("LEDGER_DEFAULT_PARTNERS_COUNT", "4")
        get_settings.cache_clear()
        try:
            record = MonthRecordValidator().build(make_draft())
        finally:
            get_settings.cache_clear()
        assert record.admin_fee_percent == 20
        assert record.partners_count == 4


class TestUserSummary:
    """Tests for the form summary text."""

    def test_summary_valid(self, validator):
        result = validator.validate(make_draft())
        assert "All checks passed" in validator.get_user_friendly_summary(result)

    def test_summary_lists_errors(self, validator):
        result = validator.validate(make_draft(month="Nope"))
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following" in summary
        assert "Unknown month" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
