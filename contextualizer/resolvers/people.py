"""Person marker resolution."""

import logging

from ..models import PersonMarker, ResolvedValue
from .base import BaseResolver, ResolutionContext

logger = logging.getLogger(__name__)

GENDER_LABELS = {
    "male": "man",
    "female": "woman",
    "neutral": "person",
}


class PersonResolver(BaseResolver):
    """
    Swaps a person's name for one from the destination country's pool.

    Pools are strict per gender: a missing pool is an error rather than a
    silent fallback to another gender.
    """

    def original(self, key: str, definition: PersonMarker, ctx: ResolutionContext) -> str:
        if definition.name:
            return definition.name
        return f"[{ctx.config.source.demonym} {GENDER_LABELS[definition.gender]}]"

    def localize(self, key: str, definition: PersonMarker, ctx: ResolutionContext) -> ResolvedValue:
        pool = ctx.country.names.for_gender(definition.gender)
        name = self.pick(pool, key, ctx, f"{definition.gender} names")
        logger.debug(f"{key}: picked name {name!r} from {len(pool)} candidates")

        return ResolvedValue(text=name)
