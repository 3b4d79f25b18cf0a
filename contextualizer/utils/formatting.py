"""Locale-aware formatting of counts, money and dates."""

import logging
import math
from datetime import date
from functools import lru_cache

from babel.core import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import format_decimal

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

NUMBER_WORDS = {
    2: "two",
    3: "three",
    4: "four",
    5: "five",
    6: "six",
    7: "seven",
    8: "eight",
    9: "nine",
    10: "ten",
    11: "eleven",
    12: "twelve",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@lru_cache(maxsize=None)
def resolve_locale(language: str) -> Locale:
    """Parse a language code, falling back to English."""
    try:
        return Locale.parse(language.replace("-", "_"))
    except (UnknownLocaleError, ValueError):
        logger.warning(f"Unknown locale '{language}', falling back to {DEFAULT_LOCALE}")
        return Locale.parse(DEFAULT_LOCALE)


def format_count(value: int, language: str = DEFAULT_LOCALE) -> str:
    """Format an integer with the locale's grouping separator."""
    return format_decimal(value, locale=resolve_locale(language))


def format_money(
    amount: float,
    symbol: str,
    pattern: str = "{symbol}{amount}",
    language: str = DEFAULT_LOCALE,
) -> str:
    """Format a money amount using a country's currency pattern.

    Amounts of at least one unit are rounded to whole units; smaller
    amounts keep two decimals so they never render as zero.
    """
    if abs(amount) >= 1 or amount == 0:
        number = format_decimal(round_half_up(amount), locale=resolve_locale(language))
    else:
        number = format_decimal(round(amount, 2), format="#,##0.00", locale=resolve_locale(language))
    return pattern.format(symbol=symbol, amount=number)


def multiplier_words(value: int) -> str:
    """Spell small multipliers, keep digits for larger ones."""
    return NUMBER_WORDS.get(value, format_count(value))


def format_date(value: str, language: str = DEFAULT_LOCALE) -> str:
    """Format an ISO date in the long style of the language.

    Free-text dates (anything that is not YYYY-MM-DD) are returned unchanged.
    """
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return value
    return babel_format_date(parsed, format="long", locale=resolve_locale(language))
