"""Place marker resolution, including city-scoped places."""

import logging

from ..data.reference import CITY_CATEGORY
from ..errors import UnresolvedReference
from ..models import PlaceMarker, ResolvedValue
from .base import BaseResolver, ResolutionContext

logger = logging.getLogger(__name__)


class PlaceResolver(BaseResolver):
    """
    Picks a destination place of the same category.

    A place with `within` is scoped to the city its parent marker resolved
    to. The parent must be a city place marker of the same document.
    """

    def check(self, key: str, definition: PlaceMarker, ctx: ResolutionContext) -> None:
        if not definition.within:
            return
        parent = ctx.document.markers.get(definition.within)
        if parent is None:
            raise UnresolvedReference(
                key, definition.within, "referenced marker is not defined", ctx.document_id
            )
        if not isinstance(parent, PlaceMarker) or parent.category != CITY_CATEGORY:
            raise UnresolvedReference(
                key, definition.within, "referenced marker is not a city", ctx.document_id
            )

    def original(self, key: str, definition: PlaceMarker, ctx: ResolutionContext) -> str:
        if definition.name:
            return definition.name
        return f"[{ctx.config.source.demonym} {definition.category.replace('-', ' ')}]"

    def localize(self, key: str, definition: PlaceMarker, ctx: ResolutionContext) -> ResolvedValue:
        catalog = ctx.country.places

        if definition.category == CITY_CATEGORY:
            name = self.pick(catalog.city_names(definition.size), key, ctx, "cities")
            return ResolvedValue(text=name, metadata={"city": name})

        pool: tuple[str, ...] = ()
        if definition.within:
            parent = ctx.resolver.resolve(definition.within, ctx)
            city = catalog.find_city(parent.metadata.get("city", parent.text))
            if city is not None:
                pool = city.places_for(definition.category)
            if not pool:
                logger.debug(
                    f"{key}: no {definition.category} in {parent.text}, using generic list"
                )

        if not pool:
            pool = catalog.generic_for(definition.category)

        name = self.pick(pool, key, ctx, definition.category)
        return ResolvedValue(text=name)
