"""Source citation and image references."""

from typing import Optional

from ..errors import UnresolvedReference
from ..models import ResolvedValue
from ..parser import IMAGE_KEY, SOURCE_KEY
from .base import ResolutionContext


def resolve_source(source_id: Optional[str], ctx: ResolutionContext) -> ResolvedValue:
    """Resolve {{source:id}} to its numbered citation."""
    if not source_id:
        raise UnresolvedReference(SOURCE_KEY, None, "source reference has no id", ctx.document_id)
    source = ctx.document.find_source(source_id)
    if source is None:
        raise UnresolvedReference(SOURCE_KEY, source_id, "no such source", ctx.document_id)
    return ResolvedValue(
        text=f"[{source.number}]",
        tooltip=source.title or None,
        type=SOURCE_KEY,
        metadata={"url": source.url, "title": source.title},
    )


def resolve_image(image_id: Optional[str], ctx: ResolutionContext) -> ResolvedValue:
    """Resolve {{image:id}} to the image record. Images carry no inline text."""
    if not image_id:
        raise UnresolvedReference(IMAGE_KEY, None, "image reference has no id", ctx.document_id)
    image = ctx.document.find_image(image_id)
    if image is None:
        raise UnresolvedReference(IMAGE_KEY, image_id, "no such image", ctx.document_id)
    return ResolvedValue(
        text="",
        type=IMAGE_KEY,
        metadata={
            "src": image.src,
            "alt": image.alt,
            "caption": image.caption,
            "contentWarning": image.content_warning,
            "credit": image.credit,
            "creditUrl": image.credit_url,
        },
    )
