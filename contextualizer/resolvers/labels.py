"""Label, date and alias marker resolution."""

from ..errors import UnresolvedReference
from ..models import AliasMarker, DateMarker, LabelMarker, ResolvedValue
from ..utils.formatting import format_date
from .base import BaseResolver, ResolutionContext


class LabelResolver(BaseResolver):
    """Event, occupation and subject labels picked from the marker's examples."""

    def original(self, key: str, definition: LabelMarker, ctx: ResolutionContext) -> str:
        return definition.literal or f"[{definition.kind}]"

    def localize(self, key: str, definition: LabelMarker, ctx: ResolutionContext) -> ResolvedValue:
        if not definition.examples:
            return ResolvedValue(text=self.original(key, definition, ctx))
        return ResolvedValue(text=self.pick(definition.examples, key, ctx, definition.kind))


class DateResolver(BaseResolver):
    """Dates are formatted for the request language but never substituted."""

    def original(self, key: str, definition: DateMarker, ctx: ResolutionContext) -> str:
        return format_date(definition.value, ctx.language)

    def localize(self, key: str, definition: DateMarker, ctx: ResolutionContext) -> ResolvedValue:
        return ResolvedValue(text=self.original(key, definition, ctx))


class AliasResolver(BaseResolver):
    """Reuses the resolution of the marker named by `same-as`."""

    def check(self, key: str, definition: AliasMarker, ctx: ResolutionContext) -> None:
        if definition.same_as not in ctx.document.markers:
            raise UnresolvedReference(
                key, definition.same_as, "referenced marker is not defined", ctx.document_id
            )

    def original(self, key: str, definition: AliasMarker, ctx: ResolutionContext) -> str:
        return ctx.resolver.resolve(definition.same_as, ctx).text

    def localize(self, key: str, definition: AliasMarker, ctx: ResolutionContext) -> ResolvedValue:
        return ctx.resolver.resolve(definition.same_as, ctx)

    def resolve(self, key: str, definition: AliasMarker, ctx: ResolutionContext) -> ResolvedValue:
        self.check(key, definition, ctx)
        return self.localize(key, definition, ctx)
