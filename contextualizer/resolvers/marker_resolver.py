"""Dispatch of marker keys to the resolver for their kind."""

import logging

from ..comparison import Comparator
from ..config import Config
from ..data.reference import ReferenceData
from ..errors import UnknownMarkerKey, UnresolvedReference
from ..models import Document, ResolvedValue
from .base import BaseResolver, ResolutionContext
from .labels import AliasResolver, DateResolver, LabelResolver
from .people import PersonResolver
from .places import PlaceResolver
from .quantities import CasualtiesResolver, CurrencyResolver, NumberResolver

logger = logging.getLogger(__name__)


class MarkerResolver:
    """
    Resolves marker keys against a document's marker table.

    Each key resolves at most once per request; later references (and
    places scoped `within` a city) reuse the cached value.
    """

    # Registry of available resolvers by marker kind
    RESOLVER_REGISTRY = {
        "person": PersonResolver,
        "place": PlaceResolver,
        "number": NumberResolver,
        "casualties": CasualtiesResolver,
        "currency": CurrencyResolver,
        "event": LabelResolver,
        "occupation": LabelResolver,
        "subject": LabelResolver,
        "date": DateResolver,
        "alias": AliasResolver,
    }

    def __init__(self, config: Config, reference: ReferenceData):
        """
        Initialize the resolver.

        Args:
            config: Pipeline configuration.
            reference: Read-only country reference data.
        """
        self.config = config
        self.reference = reference
        self.comparator = Comparator.from_config(config.comparison)
        self.resolvers: dict[str, BaseResolver] = {
            kind: resolver_class() for kind, resolver_class in self.RESOLVER_REGISTRY.items()
        }

    def context(
        self,
        document: Document,
        country_code: str,
        language: str = "en",
        contextualize: bool = True,
    ) -> ResolutionContext:
        """Build a fresh request context."""
        return ResolutionContext(
            document=document,
            country=self.reference.context_for(country_code),
            config=self.config,
            comparator=self.comparator,
            resolver=self,
            language=language,
            contextualize=contextualize,
            source_country=self.reference.country(self.config.source.country),
        )

    def resolve(self, key: str, ctx: ResolutionContext) -> ResolvedValue:
        """
        Resolve one marker key.

        Args:
            key: Marker key.
            ctx: Request context.

        Returns:
            The resolved value (cached per request).

        Raises:
            UnknownMarkerKey: If the key has no definition.
            UnresolvedReference: On circular `within`/`same-as` references.
        """
        cached = ctx.resolved.get(key)
        if cached is not None:
            return cached

        definition = ctx.document.markers.get(key)
        if definition is None:
            raise UnknownMarkerKey(key, ctx.document_id)
        if key in ctx.resolving:
            raise UnresolvedReference(key, None, "circular reference", ctx.document_id)

        resolver = self.resolvers.get(definition.kind)
        if resolver is None:
            raise UnresolvedReference(key, None, f"no resolver for kind '{definition.kind}'", ctx.document_id)

        ctx.resolving.add(key)
        try:
            value = resolver.resolve(key, definition, ctx)
        finally:
            ctx.resolving.discard(key)

        logger.debug(f"Resolved {key} ({definition.kind}) -> {value.text!r}")
        ctx.resolved[key] = value
        return value

    def resolve_all(
        self,
        document: Document,
        country_code: str,
        language: str = "en",
        contextualize: bool = True,
    ) -> dict[str, ResolvedValue]:
        """Resolve every marker of a document, in table order."""
        ctx = self.context(document, country_code, language, contextualize)
        return {key: self.resolve(key, ctx) for key in document.markers}
