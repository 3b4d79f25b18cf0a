"""Numeric, casualty and currency marker resolution."""

import logging
from typing import Optional, Union

from ..comparison import scale_count
from ..models import CasualtiesMarker, Comparison, CurrencyMarker, NumberMarker, ResolvedValue
from ..utils.formatting import format_count, format_money
from ..utils.hashing import stable_index
from .base import BaseResolver, ResolutionContext

logger = logging.getLogger(__name__)

# Pattern used for a source currency that has no country record
DEFAULT_CURRENCY_FORMAT = "{amount} {symbol}"


def _with_unit(count: int, unit: Optional[str], language: str) -> str:
    text = format_count(count, language)
    return f"{text} {unit}" if unit else text


class CountResolver(BaseResolver):
    """Shared scaling, jitter and comparison logic for counted markers."""

    def unit(self, definition) -> Optional[str]:
        return None

    def should_scale(self, definition) -> bool:
        return True

    def variance(self, definition) -> int:
        return 0

    def comparable(self, definition) -> Optional[str]:
        return None

    def original(
        self,
        key: str,
        definition: Union[NumberMarker, CasualtiesMarker],
        ctx: ResolutionContext,
    ) -> str:
        return _with_unit(definition.base, self.unit(definition), ctx.language)

    def count(
        self,
        key: str,
        definition: Union[NumberMarker, CasualtiesMarker],
        ctx: ResolutionContext,
    ) -> int:
        """Destination count after scaling and jitter."""
        value = definition.base
        if self.should_scale(definition):
            value = scale_count(
                definition.base,
                ctx.country.population,
                ctx.config.source.population,
                definition.scale_factor,
            )

        variance = self.variance(definition)
        if variance > 0:
            value += stable_index(ctx.seed(key, "variance"), 2 * variance + 1) - variance

        if definition.base >= 1 and value < 1:
            value = 1
        return max(value, 0)

    def localize(
        self,
        key: str,
        definition: Union[NumberMarker, CasualtiesMarker],
        ctx: ResolutionContext,
    ) -> ResolvedValue:
        value = self.count(key, definition, ctx)

        comparison: Optional[Comparison] = None
        category = self.comparable(definition)
        if category and ctx.compare:
            comparison = ctx.comparator.compare(value, ctx.country.events, category)

        return ResolvedValue(
            text=_with_unit(value, self.unit(definition), ctx.language),
            tooltip=comparison.phrase if comparison else None,
            comparison=comparison,
        )


class NumberResolver(CountResolver):
    """Generic counts. Scaled only when the marker asks for it."""

    def unit(self, definition: NumberMarker) -> Optional[str]:
        return definition.unit

    def should_scale(self, definition: NumberMarker) -> bool:
        return definition.scale

    def variance(self, definition: NumberMarker) -> int:
        return definition.variance

    def comparable(self, definition: NumberMarker) -> Optional[str]:
        return definition.comparable


class CasualtiesResolver(CountResolver):
    """Human casualty counts. Always scaled by population."""

    def comparable(self, definition: CasualtiesMarker) -> Optional[str]:
        return definition.comparable


class CurrencyResolver(BaseResolver):
    """Converts a source-currency amount into the destination currency."""

    def original(self, key: str, definition: CurrencyMarker, ctx: ResolutionContext) -> str:
        source = ctx.source_country
        if source is not None and source.currency == definition.base_currency:
            symbol, pattern = source.currency_symbol, source.currency_format
        else:
            symbol, pattern = definition.base_currency, DEFAULT_CURRENCY_FORMAT
        return format_money(definition.base, symbol, pattern, ctx.language)

    def localize(self, key: str, definition: CurrencyMarker, ctx: ResolutionContext) -> ResolvedValue:
        country = ctx.country.country
        if definition.base_currency != ctx.config.source.currency:
            logger.warning(
                f"{key}: base currency {definition.base_currency} differs from "
                f"source currency {ctx.config.source.currency}, converting anyway"
            )
        amount = definition.base * country.conversion_rate
        text = format_money(amount, country.currency_symbol, country.currency_format, ctx.language)

        return ResolvedValue(text=text)
