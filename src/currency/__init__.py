"""Currency masking package."""

from src.currency.mask import (
    LOCALES,
    AmountOutOfRangeError,
    CurrencyMaskCodec,
    LocaleFormat,
    MoneyInput,
    get_locale,
)

__all__ = [
    "LOCALES",
    "AmountOutOfRangeError",
    "CurrencyMaskCodec",
    "LocaleFormat",
    "MoneyInput",
    "get_locale",
]
