"""Data models for the contextualization pipeline."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from .errors import MalformedDocument

GENDER_ALIASES = {
    "m": "male",
    "f": "female",
    "x": "neutral",
    "male": "male",
    "female": "female",
    "neutral": "neutral",
}

CASUALTY_OUTCOMES = ("killed", "wounded", "missing", "detained", "executed")


# ---------------------------------------------------------------------------
# Marker definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersonMarker:
    """A person whose name is swapped for a local one."""

    kind: ClassVar[str] = "person"

    gender: str
    name: Optional[str] = None  # Source-country name
    age: Optional[int] = None
    role: Optional[str] = None


@dataclass(frozen=True)
class PlaceMarker:
    """A place, optionally scoped to a city marker via `within`."""

    kind: ClassVar[str] = "place"

    category: str
    name: Optional[str] = None
    size: Optional[str] = None
    within: Optional[str] = None


@dataclass(frozen=True)
class NumberMarker:
    """A generic count, optionally scaled by population."""

    kind: ClassVar[str] = "number"

    base: int
    unit: Optional[str] = None
    scale: bool = False
    scale_factor: float = 1.0
    variance: int = 0
    comparable: Optional[str] = None


@dataclass(frozen=True)
class CasualtiesMarker:
    """A human casualty count. Always scaled, always compared."""

    kind: ClassVar[str] = "casualties"

    base: int
    outcome: Optional[str] = None
    scale_factor: float = 1.0
    comparable: str = "any"


@dataclass(frozen=True)
class CurrencyMarker:
    """An amount in the source currency."""

    kind: ClassVar[str] = "currency"

    base: float
    base_currency: str
    period: Optional[str] = None


@dataclass(frozen=True)
class LabelMarker:
    """Event, occupation or subject label with an optional example pool."""

    kind: str
    value: Optional[str] = None
    category: Optional[str] = None
    examples: tuple[str, ...] = ()

    @property
    def literal(self) -> Optional[str]:
        return self.value or self.category


@dataclass(frozen=True)
class DateMarker:
    """A calendar date, localized but never substituted."""

    kind: ClassVar[str] = "date"

    value: str


@dataclass(frozen=True)
class AliasMarker:
    """Reuses the resolution of another marker."""

    kind: ClassVar[str] = "alias"

    same_as: str


MarkerDefinition = Union[
    PersonMarker,
    PlaceMarker,
    NumberMarker,
    CasualtiesMarker,
    CurrencyMarker,
    LabelMarker,
    DateMarker,
    AliasMarker,
]

LABEL_KINDS = ("event", "occupation", "subject")


def parse_marker(key: str, data: dict, document_id: Optional[str] = None) -> MarkerDefinition:
    """Build a marker definition from its mapping.

    The kind is detected from the property present, not from an explicit
    type field.

    Args:
        key: Marker key (used in error messages)
        data: Raw marker mapping from the document
        document_id: Owning document id

    Returns:
        A MarkerDefinition instance

    Raises:
        MalformedDocument: If the mapping matches no known marker kind
    """
    if not isinstance(data, dict):
        raise MalformedDocument(f"marker '{key}' is not a mapping", str(data), document_id)

    try:
        if "person" in data or "gender" in data:
            gender = GENDER_ALIASES.get(str(data.get("gender", "neutral")).lower())
            if gender is None:
                raise ValueError(f"invalid gender {data.get('gender')!r}")
            return PersonMarker(
                gender=gender,
                name=data.get("person") or data.get("name"),
                age=int(data["age"]) if data.get("age") is not None else None,
                role=data.get("role"),
            )

        if "place" in data:
            return PlaceMarker(
                category=data.get("category", "city"),
                name=data.get("place"),
                size=data.get("size"),
                within=data.get("within"),
            )

        if "casualties" in data:
            outcome = next((o for o in CASUALTY_OUTCOMES if data.get(o)), None)
            return CasualtiesMarker(
                base=int(data["casualties"]),
                outcome=outcome,
                scale_factor=float(data.get("scale-factor", 1.0)),
                comparable=data.get("comparable", "any"),
            )

        if "number" in data:
            return NumberMarker(
                base=int(data["number"]),
                unit=data.get("unit"),
                scale=bool(data.get("scale", False)),
                scale_factor=float(data.get("scale-factor", 1.0)),
                variance=int(data.get("variance", 0)),
                comparable=data.get("comparable"),
            )

        if "currency" in data:
            return CurrencyMarker(
                base=float(data["currency"]),
                base_currency=data.get("base-currency", "IRR"),
                period=data.get("period"),
            )

        for label_kind in LABEL_KINDS:
            if label_kind in data:
                return LabelMarker(
                    kind=label_kind,
                    value=data.get(label_kind),
                    category=data.get("category"),
                    examples=tuple(data.get("examples") or ()),
                )

        if "date" in data:
            return DateMarker(value=str(data["date"]))

        if "same-as" in data:
            return AliasMarker(same_as=data["same-as"])
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f"invalid marker '{key}': {e}", str(data), document_id)

    raise MalformedDocument(f"marker '{key}' has no recognised kind", str(data), document_id)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceReference:
    """A citation referenced as {{source:id}}."""

    id: str
    number: int
    title: str = ""
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SourceReference":
        return cls(
            id=str(data["id"]),
            number=int(data["number"]),
            title=data.get("title", ""),
            url=data.get("url"),
        )


@dataclass(frozen=True)
class ImageReference:
    """An embedded image referenced as {{image:id}}."""

    id: str
    src: str
    alt: str = ""
    caption: Optional[str] = None
    content_warning: Optional[str] = None
    credit: Optional[str] = None
    credit_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ImageReference":
        return cls(
            id=str(data["id"]),
            src=data["src"],
            alt=data.get("alt", ""),
            caption=data.get("caption"),
            content_warning=data.get("content-warning") or data.get("contentWarning"),
            credit=data.get("credit"),
            credit_url=data.get("credit-url") or data.get("creditUrl"),
        )


@dataclass(frozen=True)
class Document:
    """A story with marker placeholders in its title, summary and content."""

    id: str
    title: str
    summary: str
    content: str
    markers: dict[str, MarkerDefinition] = field(default_factory=dict)
    sources: tuple[SourceReference, ...] = ()
    images: tuple[ImageReference, ...] = ()
    slug: Optional[str] = None
    date: Optional[str] = None
    severity: Optional[str] = None
    verified: bool = False
    tags: tuple[str, ...] = ()
    hashtags: Optional[str] = None
    attribution: Optional[str] = None
    content_warning: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Create a Document from a parsed story mapping."""
        doc_id = str(data.get("id") or data.get("slug") or "")
        if not doc_id:
            raise MalformedDocument("document has no id", str(data.get("title", "")))

        markers = {
            key: parse_marker(key, raw, doc_id)
            for key, raw in (data.get("markers") or {}).items()
        }
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            summary=data.get("summary", ""),
            content=data.get("content", ""),
            markers=markers,
            sources=tuple(SourceReference.from_dict(s) for s in data.get("sources") or ()),
            images=tuple(ImageReference.from_dict(i) for i in data.get("images") or ()),
            slug=data.get("slug", doc_id),
            date=str(data["date"]) if data.get("date") is not None else None,
            severity=data.get("severity"),
            verified=bool(data.get("verified", False)),
            tags=tuple(data.get("tags") or ()),
            hashtags=data.get("hashtags"),
            attribution=data.get("source"),
            content_warning=data.get("content-warning"),
            image=data.get("image"),
        )

    def find_source(self, source_id: str) -> Optional[SourceReference]:
        return next((s for s in self.sources if s.id == source_id), None)

    def find_image(self, image_id: str) -> Optional[ImageReference]:
        return next((i for i in self.images if i.id == image_id), None)


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparableEvent:
    """A destination-country tragedy used as a relatable anchor."""

    id: Union[int, str]
    name: str
    category: str
    casualties: int
    year: Optional[int] = None
    country: Optional[str] = None


# ---------------------------------------------------------------------------
# Resolution output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Comparison:
    """A phrased comparison between a scaled count and a comparable event."""

    phrase: str
    explanation: str
    event: ComparableEvent
    ratio: float


@dataclass(frozen=True)
class ResolvedValue:
    """Result of resolving one marker."""

    text: str
    original: Optional[str] = None
    tooltip: Optional[str] = None
    type: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    comparison: Optional[Comparison] = None


@dataclass(frozen=True)
class DisplaySegment:
    """One entry of the ordered output consumed by the rendering layer."""

    kind: str  # text, paragraph-break, marker, source, image, comparison
    text: str = ""
    original: Optional[str] = None
    tooltip: Optional[str] = None
    type: Optional[str] = None  # Marker type for marker-derived segments
    key: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to the segment shape consumed by the rendering layer."""
        result = {
            "text": self.text,
            "original": self.original,
            "type": self.type,
            "key": self.key,
        }
        if self.tooltip is not None:
            result["tooltip"] = self.tooltip
        for name, value in self.metadata.items():
            if value is not None:
                result[name] = value
        return result
