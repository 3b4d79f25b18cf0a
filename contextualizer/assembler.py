"""Assembly of tokens and resolved values into display segments."""

import logging
from typing import Optional, Sequence

from .errors import UnresolvedReference
from .models import AliasMarker, Comparison, DisplaySegment, PersonMarker, ResolvedValue
from .parser import IMAGE_KEY, MARKER, PARAGRAPH_BREAK, SOURCE_KEY, TEXT, Token, tokenize
from .resolvers import MarkerResolver, ResolutionContext, resolve_image, resolve_source

logger = logging.getLogger(__name__)

COMPARISON = "comparison"

AGE_SUFFIX = "age"
ORIGINAL_SUFFIX = "original"
TRANSLATED_SUFFIX = "translated"
COMPARABLE_SUFFIX = "comparable"


class SegmentAssembler:
    """
    Turns a token stream into the ordered segment list.

    Literal text passes through untouched, so no whitespace is added or
    dropped at marker boundaries.
    """

    def __init__(self, resolver: MarkerResolver):
        """
        Initialize the assembler.

        Args:
            resolver: Dispatcher used to resolve marker keys.
        """
        self.resolver = resolver

    def assemble_text(
        self, text: str, ctx: ResolutionContext, inline_comparisons: bool = False
    ) -> list[DisplaySegment]:
        """Tokenize one field of the document and assemble it."""
        tokens = tokenize(text, ctx.document.markers.keys(), ctx.document_id)
        return self.assemble(tokens, ctx, inline_comparisons)

    def assemble(
        self,
        tokens: Sequence[Token],
        ctx: ResolutionContext,
        inline_comparisons: bool = False,
    ) -> list[DisplaySegment]:
        """
        Build display segments for a token stream.

        Args:
            tokens: Output of tokenize().
            ctx: Request context (shared across title, summary and content).
            inline_comparisons: Emit a comparison segment after each compared number.

        Returns:
            Ordered display segments.
        """
        segments: list[DisplaySegment] = []
        for token in tokens:
            if token.kind == TEXT:
                segments.append(DisplaySegment(kind=TEXT, text=token.value, type=TEXT))
            elif token.kind == PARAGRAPH_BREAK:
                segments.append(DisplaySegment(kind=PARAGRAPH_BREAK, type=PARAGRAPH_BREAK))
            elif token.kind == MARKER:
                segments.extend(self._marker_segments(token, ctx, inline_comparisons))
        return segments

    def _marker_segments(
        self, token: Token, ctx: ResolutionContext, inline_comparisons: bool
    ) -> list[DisplaySegment]:
        if token.key == SOURCE_KEY:
            return [_reference_segment(resolve_source(token.suffix, ctx), token.suffix)]
        if token.key == IMAGE_KEY:
            return [_reference_segment(resolve_image(token.suffix, ctx), token.suffix)]

        key, suffix = token.key, token.suffix
        value = self.resolver.resolve(key, ctx)

        if suffix is None:
            segments = [
                DisplaySegment(
                    kind=MARKER,
                    text=value.text,
                    original=value.original,
                    tooltip=value.tooltip,
                    type=value.type,
                    key=key,
                )
            ]
            if inline_comparisons and value.comparison is not None:
                segments.append(_comparison_segment(value.comparison, key))
            return segments

        if suffix == AGE_SUFFIX:
            age = self._person_age(key, ctx)
            return [DisplaySegment(kind=MARKER, text=str(age), type=AGE_SUFFIX, key=key)]

        if suffix == ORIGINAL_SUFFIX:
            text = value.original if value.original is not None else value.text
            return [DisplaySegment(kind=MARKER, text=text, type=value.type, key=key)]

        if suffix == TRANSLATED_SUFFIX:
            return [
                DisplaySegment(
                    kind=MARKER, text=value.text, original=value.original, type=value.type, key=key
                )
            ]

        if suffix == COMPARABLE_SUFFIX:
            if value.comparison is None:
                logger.debug(f"{key}: no comparison to render for :{COMPARABLE_SUFFIX}")
                return []
            return [_comparison_segment(value.comparison, key)]

        raise UnresolvedReference(key, suffix, "unknown modifier", ctx.document_id)

    def _person_age(self, key: str, ctx: ResolutionContext) -> int:
        """Age of a person marker, following aliases."""
        definition = ctx.document.markers[key]
        seen = {key}
        while isinstance(definition, AliasMarker) and definition.same_as not in seen:
            seen.add(definition.same_as)
            definition = ctx.document.markers[definition.same_as]

        if not isinstance(definition, PersonMarker) or definition.age is None:
            raise UnresolvedReference(key, AGE_SUFFIX, "marker has no age", ctx.document_id)
        return definition.age


def _reference_segment(value: ResolvedValue, ref_id: Optional[str]) -> DisplaySegment:
    return DisplaySegment(
        kind=value.type,
        text=value.text,
        tooltip=value.tooltip,
        type=value.type,
        key=ref_id,
        metadata=dict(value.metadata),
    )


def _comparison_segment(comparison: Comparison, key: str) -> DisplaySegment:
    return DisplaySegment(
        kind=COMPARISON,
        text=comparison.phrase,
        tooltip=comparison.explanation,
        type=COMPARISON,
        key=key,
    )


def count_originals(segments: Sequence[DisplaySegment], end: Optional[int] = None) -> int:
    """Number of segments before `end` that carry an original value.

    The rendering layer uses this as the reveal-animation start index.
    """
    return sum(1 for segment in segments[:end] if segment.original is not None)


def reveal_offsets(sections: Sequence[Sequence[DisplaySegment]]) -> list[int]:
    """Running original counts at the start of each section (title, summary, content)."""
    offsets = []
    total = 0
    for section in sections:
        offsets.append(total)
        total += count_originals(section)
    return offsets


def display_text(segments: Sequence[DisplaySegment]) -> str:
    """Concatenated display text, paragraph breaks excluded."""
    return "".join(s.text for s in segments if s.kind != PARAGRAPH_BREAK)


def original_text(segments: Sequence[DisplaySegment]) -> str:
    """Concatenated source-country text, paragraph breaks and comparisons excluded."""
    return "".join(
        s.original if s.original is not None else s.text
        for s in segments
        if s.kind not in (PARAGRAPH_BREAK, COMPARISON)
    )
