"""Locale service: the single currency formatter and local timezone.

Uses babel with system timezone auto-detection.

Configuration:
    LOCALE env var (default: vi_VN) - determines currency and number formatting

Example:
    >>> from rentledger.services.locale_service import format_amount
    >>> format_amount(3950000)
    '3.950.000 ₫'
"""

import logging
import os
from datetime import tzinfo

from babel import Locale, UnknownLocaleError
from babel.dates import LOCALTZ
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    format_decimal as babel_format_decimal,
)
from babel.numbers import (
    get_currency_symbol as babel_get_currency_symbol,
)
from babel.numbers import (
    get_territory_currencies,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "vi_VN"
DEFAULT_CURRENCY = "VND"


def _get_locale() -> str:
    """Get locale from environment with validation and fallback."""
    locale_str = os.getenv("LOCALE", DEFAULT_LOCALE)
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Invalid LOCALE '%s': %s. Falling back to '%s'", locale_str, e, DEFAULT_LOCALE)
        return DEFAULT_LOCALE


def _get_currency_from_locale(locale_str: str) -> str:
    """Derive currency code from locale territory (e.g. vi_VN -> VND)."""
    try:
        territory = Locale.parse(locale_str).territory
        if territory:
            currencies = get_territory_currencies(territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Could not derive currency from locale '%s': %s", locale_str, e)

    return DEFAULT_CURRENCY


# Module-level constants (computed once at import)
LOCALE = _get_locale()
CURRENCY = _get_currency_from_locale(LOCALE)


def get_system_timezone() -> tzinfo:
    return LOCALTZ


def get_currency_symbol() -> str:
    return babel_get_currency_symbol(CURRENCY, locale=LOCALE)


def format_amount(amount: int, include_symbol: bool = True) -> str:
    """Format a monetary amount according to the locale.

    Args:
        amount: Whole currency units
        include_symbol: Whether to include the currency symbol

    Returns:
        Formatted string (e.g. '3.950.000 ₫', or '3.950.000' without symbol)
    """
    if include_symbol:
        return babel_format_currency(amount, CURRENCY, locale=LOCALE)
    return babel_format_decimal(amount, locale=LOCALE)


__all__ = [
    "LOCALE",
    "CURRENCY",
    "get_system_timezone",
    "get_currency_symbol",
    "format_amount",
]
