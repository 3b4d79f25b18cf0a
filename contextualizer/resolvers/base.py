"""Base class and per-request state for marker resolvers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional, Sequence

from ..comparison import Comparator
from ..config import Config
from ..data.reference import Country, CountryContext
from ..errors import EmptyCandidatePool
from ..models import Document, MarkerDefinition, ResolvedValue
from ..utils.hashing import select

if TYPE_CHECKING:
    from .marker_resolver import MarkerResolver


@dataclass
class ResolutionContext:
    """
    State for one translation request.

    Built fresh per (document, country, language) request. The resolved
    cache is what keeps a marker used in title, summary and content
    resolving to the same value.
    """

    document: Document
    country: CountryContext
    config: Config
    comparator: Comparator
    resolver: "MarkerResolver"
    language: str = "en"
    contextualize: bool = True
    source_country: Optional[Country] = None
    resolved: dict[str, ResolvedValue] = field(default_factory=dict)
    resolving: set[str] = field(default_factory=set)

    @property
    def document_id(self) -> str:
        return self.document.id

    @property
    def compare(self) -> bool:
        return self.contextualize and self.config.comparison.enabled

    def seed(self, key: str, *extra: str) -> tuple[str, ...]:
        """Seed parts for deterministic selection of a marker's value."""
        if self.config.selection.scope == "global":
            return (key, *extra)
        return (self.document.id, key, *extra)


class BaseResolver(ABC):
    """
    Base class for marker resolvers.

    Each resolver computes the original (source-country) text and the
    localized value. resolve() is the single entry point for both
    rendering modes: with contextualization disabled it returns the
    original text and no substitution.
    """

    def check(self, key: str, definition: MarkerDefinition, ctx: ResolutionContext) -> None:
        """Validate references before resolving. Raises on failure."""

    @abstractmethod
    def original(self, key: str, definition: MarkerDefinition, ctx: ResolutionContext) -> str:
        """
        Source-country text for the marker.

        Args:
            key: Marker key.
            definition: Marker definition.
            ctx: Request context.

        Returns:
            Display text of the marker in its original context.
        """
        pass

    @abstractmethod
    def localize(
        self, key: str, definition: MarkerDefinition, ctx: ResolutionContext
    ) -> ResolvedValue:
        """
        Destination-country value for the marker.

        Args:
            key: Marker key.
            definition: Marker definition.
            ctx: Request context.

        Returns:
            ResolvedValue with text (and optionally tooltip/metadata/comparison).
        """
        pass

    def resolve(self, key: str, definition: MarkerDefinition, ctx: ResolutionContext) -> ResolvedValue:
        """Resolve a marker in either rendering mode."""
        self.check(key, definition, ctx)
        original = self.original(key, definition, ctx)

        if not ctx.contextualize:
            return ResolvedValue(text=original, type=definition.kind)

        value = self.localize(key, definition, ctx)
        substituted = original if original != value.text else None
        tooltip = value.tooltip
        if tooltip is None and substituted is not None:
            tooltip = f"Original: {substituted}"
        return replace(value, original=substituted, tooltip=tooltip, type=definition.kind)

    def pick(
        self,
        pool: Sequence[str],
        key: str,
        ctx: ResolutionContext,
        category: str,
    ) -> str:
        """Deterministically pick one candidate, failing on an empty pool."""
        if not pool:
            raise EmptyCandidatePool(ctx.country.code, category, ctx.document_id)
        return select(pool, ctx.seed(key))

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}()"
