"""
Currency Mask Codec

Money fields are typed as digits only. After every keystroke the field is
re-masked so it always shows a valid two-decimal amount:

    "1"      -> "0,01"
    "15"     -> "0,15"
    "150075" -> "1.500,75"

DESIGN DECISION: The codec lives at the input boundary. Everything behind
it (validator, summary engine, storage) only ever sees Decimal amounts,
so locale formatting can never leak into the arithmetic.

Amounts that would need more than 15 digits are REJECTED rather than
clamped: they cannot be stored as a JSON number without losing cents.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional, Union

from src.models.ledger import CENT, MAX_AMOUNT, MAX_AMOUNT_DIGITS


_NON_DIGITS = re.compile(r"[^0-9]")


class AmountOutOfRangeError(ValueError):
    """Amount cannot be represented exactly as a two-decimal value."""
    pass


class LocaleFormat(NamedTuple):
    """Separators and currency symbol of a display locale."""
    name: str
    thousands_separator: str
    decimal_separator: str
    currency_symbol: str


LOCALES: dict[str, LocaleFormat] = {
    "pt_BR": LocaleFormat("pt_BR", ".", ",", "R$"),
    "en_US": LocaleFormat("en_US", ",", ".", "$"),
    "de_DE": LocaleFormat("de_DE", ".", ",", "€"),
}


def get_locale(name: str) -> LocaleFormat:
    """Look up a supported locale (accepts 'pt-BR' as well as 'pt_BR')."""
    key = name.replace("-", "_")
    try:
        return LOCALES[key]
    except KeyError:
        raise ValueError(
            f"Unsupported locale: {name}. Supported: {', '.join(sorted(LOCALES))}"
        )


class CurrencyMaskCodec:
    """
    Converts between fixed-point amounts and locale-formatted strings.

    One codec is bound to one locale. It holds no other state, so a
    single instance can serve every field of a form.
    """

    def __init__(self, locale: Union[str, LocaleFormat] = "pt_BR"):
        self._locale = locale if isinstance(locale, LocaleFormat) else get_locale(locale)
        # Python's ',.2f' uses ',' for grouping and '.' for decimals
        self._translation = str.maketrans({
            ",": self._locale.thousands_separator,
            ".": self._locale.decimal_separator,
        })

    @property
    def locale(self) -> LocaleFormat:
        return self._locale

    @property
    def zero(self) -> str:
        """Masked representation of zero ('0,00' in pt_BR)."""
        return self.format(Decimal("0"))

    def format(self, amount: Union[Decimal, int]) -> str:
        """
        Render an amount with exactly two fractional digits and the
        locale's grouping. Negative amounts get a leading '-'.
        """
        value = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        text = f"{abs(value):,.2f}".translate(self._translation)
        return f"{sign}{text}"

    def format_currency(self, amount: Union[Decimal, int]) -> str:
        """Render an amount with the currency symbol, e.g. 'R$ 1.500,75'."""
        value = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        return f"{sign}{self._locale.currency_symbol} {self.format(abs(value))}"

    def parse_digits(self, raw: Optional[str]) -> Decimal:
        """
        Keep only the digits of ``raw`` and read them as cents.

        Letters, separators and symbols are dropped, digit order is kept.
        An input without digits is zero.

        Raises:
            AmountOutOfRangeError: More than 15 significant digits.
        """
        digits = _NON_DIGITS.sub("", raw or "").lstrip("0")
        if not digits:
            return Decimal("0.00")
        if len(digits) > MAX_AMOUNT_DIGITS:
            raise AmountOutOfRangeError(
                f"Amount has {len(digits)} digits; the maximum is "
                f"{MAX_AMOUNT_DIGITS} ({self.format(MAX_AMOUNT)})"
            )
        return (Decimal(int(digits)) / 100).quantize(CENT)

    def reformat_on_keystroke(self, raw: Optional[str]) -> str:
        """Re-mask a field after a keystroke (parse_digits then format)."""
        return self.format(self.parse_digits(raw))

    def on_focus(self, text: str) -> str:
        """A zero-valued field is cleared so the user can type fresh digits."""
        if self.parse_digits(text) == 0:
            return ""
        return text

    def on_blur(self, text: str) -> str:
        """An empty field falls back to the masked zero."""
        if text == "":
            return self.zero
        return text


class MoneyInput:
    """
    State of one masked money field in a form.

    The form reads ``value`` (a Decimal) when submitting; ``text`` is what
    the field displays. A keystroke that would overflow is ignored and the
    field keeps its previous text.
    """

    def __init__(
        self,
        codec: CurrencyMaskCodec,
        value: Union[Decimal, int] = Decimal("0"),
    ):
        self._codec = codec
        self.text = codec.format(value)

    @property
    def value(self) -> Decimal:
        return self._codec.parse_digits(self.text)

    def on_change(self, raw: str) -> str:
        try:
            self.text = self._codec.reformat_on_keystroke(raw)
        except AmountOutOfRangeError:
            pass
        return self.text

    def on_focus(self) -> str:
        self.text = self._codec.on_focus(self.text)
        return self.text

    def on_blur(self) -> str:
        self.text = self._codec.on_blur(self.text)
        return self.text
