"""Consistency checks for reference data and stories."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from .assembler import AGE_SUFFIX, COMPARABLE_SUFFIX, ORIGINAL_SUFFIX, TRANSLATED_SUFFIX
from .data.documents import STORY_FILENAME, DocumentStore
from .data.reference import (
    COUNTRIES_FILE,
    EVENTS_FILE,
    NAMES_FILE,
    PLACES_FILE,
    CITY_CATEGORY,
    ReferenceData,
)
from .errors import ContextualizationError
from .models import AliasMarker, Document, PersonMarker, PlaceMarker
from .parser import IMAGE_KEY, MARKER, SOURCE_KEY, tokenize
from .resolvers import MarkerResolver

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"

CITY_SIZES = ("small", "medium", "large")
SEVERITIES = ("low", "medium", "high", "critical")
GENDERS = ("male", "female", "neutral")
MARKER_SUFFIXES = (AGE_SUFFIX, ORIGINAL_SUFFIX, TRANSLATED_SUFFIX, COMPARABLE_SUFFIX)
EARLIEST_EVENT_YEAR = 1900


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in the data."""

    file: str
    issue: str
    severity: str = ERROR

    def __str__(self) -> str:
        return f"[{self.severity}] {self.file}: {self.issue}"


def validate_reference(reference: ReferenceData) -> list[ValidationIssue]:
    """Check country, name, place and event tables for every country."""
    issues: list[ValidationIssue] = []

    for code in reference.country_codes:
        country = reference.country(code)
        if country.population <= 0:
            issues.append(ValidationIssue(COUNTRIES_FILE, f"{code}: Invalid population"))
        if country.conversion_rate <= 0:
            issues.append(ValidationIssue(COUNTRIES_FILE, f"{code}: Invalid conversion rate"))
        if not country.currency_symbol:
            issues.append(ValidationIssue(COUNTRIES_FILE, f"{code}: Missing currency symbol", WARNING))

        names = reference.names_for(code)
        if names is None:
            issues.append(ValidationIssue(NAMES_FILE, f"{code}: No names, default country used", WARNING))
        else:
            for gender in GENDERS:
                if not names.for_gender(gender):
                    issues.append(ValidationIssue(NAMES_FILE, f"{code}: No {gender} names"))

        places = reference.places_for(code)
        if places is None:
            issues.append(ValidationIssue(PLACES_FILE, f"{code}: No places, default country used", WARNING))
        else:
            issues.extend(_validate_places(code, places))

        events = reference.events_for(code)
        if not events:
            issues.append(ValidationIssue(EVENTS_FILE, f"{code}: No events defined", WARNING))
        for event in events:
            if event.casualties <= 0:
                issues.append(
                    ValidationIssue(EVENTS_FILE, f"{code}/{event.id}: Invalid casualties: {event.casualties}")
                )
            if not event.category:
                issues.append(ValidationIssue(EVENTS_FILE, f"{code}/{event.id}: Missing 'category'"))
            if not event.year or not EARLIEST_EVENT_YEAR <= event.year <= date.today().year:
                issues.append(
                    ValidationIssue(EVENTS_FILE, f"{code}/{event.id}: Invalid year: {event.year}", WARNING)
                )

    return issues


def _validate_places(code, places) -> list[ValidationIssue]:
    issues = []
    if not places.cities:
        issues.append(ValidationIssue(PLACES_FILE, f"{code}: Missing 'cities' array"))

    for city in places.cities:
        if city.size not in CITY_SIZES:
            issues.append(ValidationIssue(PLACES_FILE, f"{code}/{city.name}: Invalid or missing 'size'"))
        if not isinstance(city.population, int) or city.population <= 0:
            issues.append(ValidationIssue(PLACES_FILE, f"{code}/{city.name}: Invalid 'population'", WARNING))
        if not city.places_for("landmark"):
            issues.append(ValidationIssue(PLACES_FILE, f"{code}/{city.name}: No landmarks defined"))
        if not city.places_for("university"):
            issues.append(ValidationIssue(PLACES_FILE, f"{code}/{city.name}: No universities defined", WARNING))
        if not city.places_for("government-facility"):
            issues.append(
                ValidationIssue(PLACES_FILE, f"{code}/{city.name}: No government facilities defined", WARNING)
            )

    if not places.generic:
        issues.append(ValidationIssue(PLACES_FILE, f"{code}: Missing 'generic' fallbacks", WARNING))
    return issues


def validate_document(document: Document) -> list[ValidationIssue]:
    """Check that every reference in a story resolves within the story."""
    file = f"{document.slug or document.id}/{STORY_FILENAME}"
    issues: list[ValidationIssue] = []
    referenced: set[str] = set()

    for field_name in ("title", "summary", "content"):
        text = getattr(document, field_name)
        try:
            tokens = tokenize(text, document.markers.keys(), document.id)
        except ContextualizationError as e:
            issues.append(ValidationIssue(file, f"{field_name}: {e.message}"))
            continue

        for token in tokens:
            if token.kind != MARKER:
                continue
            if token.key == SOURCE_KEY:
                if not token.suffix or document.find_source(token.suffix) is None:
                    issues.append(ValidationIssue(file, f"{field_name}: Unknown source '{token.suffix}'"))
            elif token.key == IMAGE_KEY:
                if not token.suffix or document.find_image(token.suffix) is None:
                    issues.append(ValidationIssue(file, f"{field_name}: Unknown image '{token.suffix}'"))
            else:
                referenced.add(token.key)
                if token.suffix is not None and token.suffix not in MARKER_SUFFIXES:
                    issues.append(
                        ValidationIssue(file, f"{field_name}: Unknown modifier '{token.key}:{token.suffix}'")
                    )
                if token.suffix == AGE_SUFFIX:
                    definition = document.markers[token.key]
                    if not isinstance(definition, PersonMarker) or definition.age is None:
                        issues.append(ValidationIssue(file, f"{token.key}: '{AGE_SUFFIX}' used without an age"))

    for key, definition in document.markers.items():
        if isinstance(definition, PlaceMarker) and definition.within:
            parent = document.markers.get(definition.within)
            if parent is None:
                issues.append(ValidationIssue(file, f"{key}: 'within' references missing marker '{definition.within}'"))
            elif not isinstance(parent, PlaceMarker) or parent.category != CITY_CATEGORY:
                issues.append(ValidationIssue(file, f"{key}: 'within' target '{definition.within}' is not a city"))
        if isinstance(definition, AliasMarker) and definition.same_as not in document.markers:
            issues.append(ValidationIssue(file, f"{key}: 'same-as' references missing marker '{definition.same_as}'"))

    for key in document.markers:
        if key not in referenced and not _is_referenced_indirectly(key, document):
            issues.append(ValidationIssue(file, f"{key}: Marker is never used", WARNING))

    if document.severity is not None and document.severity not in SEVERITIES:
        issues.append(ValidationIssue(file, f"Invalid severity '{document.severity}'", WARNING))
    if document.date is not None:
        try:
            date.fromisoformat(document.date)
        except ValueError:
            issues.append(ValidationIssue(file, f"Date '{document.date}' is not YYYY-MM-DD", WARNING))

    return issues


def _is_referenced_indirectly(key: str, document: Document) -> bool:
    """True when another marker points at key through `within` or `same-as`."""
    for definition in document.markers.values():
        if isinstance(definition, PlaceMarker) and definition.within == key:
            return True
        if isinstance(definition, AliasMarker) and definition.same_as == key:
            return True
    return False


def validate_resolution(
    documents: Iterable[Document],
    resolver: MarkerResolver,
    countries: Optional[Iterable[str]] = None,
) -> list[ValidationIssue]:
    """Resolve every marker of every story for every country."""
    issues: list[ValidationIssue] = []
    codes = list(countries) if countries is not None else resolver.reference.country_codes

    for document in documents:
        file = f"{document.slug or document.id}/{STORY_FILENAME}"
        for code in codes:
            try:
                resolver.resolve_all(document, code)
            except ContextualizationError as e:
                issues.append(ValidationIssue(file, f"{code}: {e.message}"))
    return issues


def validate_all(
    reference: ReferenceData,
    documents: DocumentStore,
    resolver: Optional[MarkerResolver] = None,
) -> list[ValidationIssue]:
    """Run every check. Resolution is only dry-run when a resolver is given."""
    issues = validate_reference(reference)
    for document in documents:
        issues.extend(validate_document(document))
    if resolver is not None:
        issues.extend(validate_resolution(documents, resolver))

    errors = sum(1 for issue in issues if issue.severity == ERROR)
    logger.info(
        f"Validated {len(reference.country_codes)} countries and {len(documents)} stories: "
        f"{errors} errors, {len(issues) - errors} warnings"
    )
    return issues
