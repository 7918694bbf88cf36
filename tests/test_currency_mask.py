"""Tests for the currency mask codec and masked money fields."""

import pytest
from decimal import Decimal

from src.currency import (
    AmountOutOfRangeError,
    CurrencyMaskCodec,
    MoneyInput,
    get_locale,
)
from src.models.ledger import MAX_AMOUNT


@pytest.fixture
def codec():
    return CurrencyMaskCodec("pt_BR")


class TestFormat:
    """Tests for rendering amounts."""

    def test_format_pt_br(self, codec):
        """Test Brazilian separators."""
        assert codec.format(Decimal("1500.75")) == "1.500,75"
        assert codec.format(Decimal("0")) == "0,00"
        assert codec.format(Decimal("1234567.8")) == "1.234.567,80"

    def test_format_en_us(self):
        """Test US separators."""
        assert CurrencyMaskCodec("en_US").format(Decimal("1500.75")) == "1,500.75"

    def test_format_rounds_half_up(self, codec):
        """Test rounding of sub-cent values."""
        assert codec.format(Decimal("0.005")) == "0,01"
        assert codec.format(Decimal("2.675")) == "2,68"

    def test_format_negative(self, codec):
        """Test that negative amounts keep their sign."""
        assert codec.format(Decimal("-83.33")) == "-83,33"

    def test_format_currency(self, codec):
        """Test currency symbol placement."""
        assert codec.format_currency(Decimal("1500.75")) == "R$ 1.500,75"
        assert codec.format_currency(Decimal("-83.33")) == "-R$ 83,33"

    def test_zero(self, codec):
        """Test the masked zero."""
        assert codec.zero == "0,00"

    def test_locale_aliases(self):
        """Test that 'pt-BR' is accepted."""
        assert get_locale("pt-BR").decimal_separator == ","

    def test_unknown_locale(self):
        """Test that unsupported locales are rejected."""
        with pytest.raises(ValueError, match="Unsupported locale"):
            CurrencyMaskCodec("xx_XX")


class TestParseDigits:
    """Tests for reading typed digits as cents."""

    def test_parse_cents(self, codec):
        """Test the typing sequence 1 → 15 → 150 → 150075."""
        assert codec.parse_digits("1") == Decimal("0.01")
        assert codec.parse_digits("15") == Decimal("0.15")
        assert codec.parse_digits("150") == Decimal("1.50")
        assert codec.parse_digits("150075") == Decimal("1500.75")

    def test_parse_ignores_non_digits(self, codec):
        """Test that letters and separators are dropped in order."""
        assert codec.parse_digits("R$ 1.500,75") == Decimal("1500.75")
        assert codec.parse_digits("1a2b3") == Decimal("1.23")

    def test_parse_empty(self, codec):
        """Test that input without digits is zero."""
        assert codec.parse_digits("") == Decimal("0")
        assert codec.parse_digits(None) == Decimal("0")
        assert codec.parse_digits("abc") == Decimal("0")

    def test_parse_leading_zeros(self, codec):
        """Test that leading zeros do not count toward the digit limit."""
        assert codec.parse_digits("0000000000000000001") == Decimal("0.01")

    def test_parse_max_amount(self, codec):
        """Test the largest representable amount."""
        assert codec.parse_digits("999999999999999") == MAX_AMOUNT

    def test_parse_too_many_digits(self, codec):
        """Test that 16 significant digits are rejected."""
        with pytest.raises(AmountOutOfRangeError):
            codec.parse_digits("1000000000000000")


class TestKeystrokes:
    """Tests for field behaviour while typing."""

    def test_reformat_on_keystroke(self, codec):
        """Test re-masking after a keystroke."""
        assert codec.reformat_on_keystroke("150075") == "1.500,75"
        # Typing one more digit into an already masked field
        assert codec.reformat_on_keystroke("1.500,751") == "15.007,51"
        # Deleting the last digit
        assert codec.reformat_on_keystroke("1.500,7") == "150,07"

    def test_mask_is_idempotent(self, codec):
        """Test that re-masking a masked value is a no-op."""
        masked = codec.reformat_on_keystroke("98765")
        assert codec.reformat_on_keystroke(masked) == masked

    def test_focus_clears_zero(self, codec):
        """Test that focusing a zero field empties it."""
        assert codec.on_focus("0,00") == ""
        assert codec.on_focus("12,00") == "12,00"

    def test_blur_restores_zero(self, codec):
        """Test that leaving an empty field shows zero."""
        assert codec.on_blur("") == "0,00"
        assert codec.on_blur("5,00") == "5,00"


class TestMoneyInput:
    """Tests for the masked field state."""

    def test_initial_value(self, codec):
        """Test that the field starts masked."""
        field = MoneyInput(codec, Decimal("1200"))
        assert field.text == "1.200,00"
        assert field.value == Decimal("1200.00")

    def test_typing(self, codec):
        """Test a full edit cycle."""
        field = MoneyInput(codec)
        assert field.on_focus() == ""
        for raw in ["1", "15", "150", "1500", "15007", "150075"]:
            field.on_change(raw)
        assert field.text == "1.500,75"
        assert field.value == Decimal("1500.75")
        assert field.on_blur() == "1.500,75"

    def test_blur_after_clearing(self, codec):
        """Test that a cleared field is zero after blur."""
        field = MoneyInput(codec, Decimal("10"))
        field.text = ""
        assert field.on_blur() == "0,00"
        assert field.value == Decimal("0")

    def test_overflow_keystroke_is_ignored(self, codec):
        """Test that a 16th digit does not change the field."""
        field = MoneyInput(codec)
        field.on_change("999999999999999")
        assert field.on_change("9999999999999999") == "9.999.999.999.999,99"
        assert field.value == MAX_AMOUNT


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
