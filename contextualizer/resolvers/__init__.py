"""Marker resolver implementations."""

from .base import BaseResolver, ResolutionContext
from .labels import AliasResolver, DateResolver, LabelResolver
from .marker_resolver import MarkerResolver
from .people import PersonResolver
from .places import PlaceResolver
from .quantities import CasualtiesResolver, CurrencyResolver, NumberResolver
from .references import resolve_image, resolve_source

__all__ = [
    "AliasResolver",
    "BaseResolver",
    "CasualtiesResolver",
    "CurrencyResolver",
    "DateResolver",
    "LabelResolver",
    "MarkerResolver",
    "NumberResolver",
    "PersonResolver",
    "PlaceResolver",
    "ResolutionContext",
    "resolve_image",
    "resolve_source",
]
