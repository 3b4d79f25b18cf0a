"""Read-only country reference data: population, currency, names, places, events."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from ..models import ComparableEvent

logger = logging.getLogger(__name__)

COUNTRIES_FILE = "countries.yaml"
NAMES_FILE = "names.yaml"
PLACES_FILE = "places.yaml"
EVENTS_FILE = "comparable-events.yaml"

CITY_CATEGORY = "city"

# Place categories whose data key is not simply the category plus "s"
PLACE_CATEGORY_KEYS = {
    "landmark": "landmarks",
    "university": "universities",
    "government-facility": "government-facilities",
    "police-station": "police-stations",
}


def category_key(category: str) -> str:
    """Map a place category to its key in places.yaml."""
    return PLACE_CATEGORY_KEYS.get(category, f"{category}s")


def _as_pool(value: Union[list, dict, None]) -> tuple[str, ...]:
    """Flatten a list or a mapping of lists (e.g. landmarks by kind) into a tuple."""
    if not value:
        return ()
    if isinstance(value, dict):
        return tuple(item for items in value.values() for item in (items or ()))
    return tuple(value)


@dataclass(frozen=True)
class Country:
    """Per-country numbers used for scaling and currency conversion."""

    code: str
    name: str
    population: int
    currency: str
    currency_symbol: str
    conversion_rate: float  # Source currency -> local currency
    currency_format: str = "{symbol}{amount}"
    languages: tuple[str, ...] = ("en",)

    @classmethod
    def from_dict(cls, data: dict) -> "Country":
        return cls(
            code=data["code"],
            name=data.get("name", data["code"]),
            population=int(data["population"]),
            currency=data.get("currency", ""),
            currency_symbol=data.get("currency-symbol", data.get("currency", "")),
            conversion_rate=float(data.get("conversion-rate", 1.0)),
            currency_format=data.get("currency-format", "{symbol}{amount}"),
            languages=tuple(data.get("languages") or ("en",)),
        )


@dataclass(frozen=True)
class NamePool:
    """Given names by gender."""

    male: tuple[str, ...] = ()
    female: tuple[str, ...] = ()
    neutral: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "NamePool":
        return cls(
            male=_as_pool(data.get("male")),
            female=_as_pool(data.get("female")),
            neutral=_as_pool(data.get("neutral")),
        )

    def for_gender(self, gender: str) -> tuple[str, ...]:
        return getattr(self, gender, ())


@dataclass(frozen=True)
class City:
    """A city with its landmarks and facilities."""

    name: str
    size: Optional[str] = None
    population: Optional[int] = None
    facilities: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "City":
        facilities = {
            key: _as_pool(value)
            for key, value in data.items()
            if key not in ("name", "size", "population")
        }
        return cls(
            name=data["name"],
            size=data.get("size"),
            population=data.get("population"),
            facilities=facilities,
        )

    def places_for(self, category: str) -> tuple[str, ...]:
        return self.facilities.get(category_key(category), ())


@dataclass(frozen=True)
class PlaceCatalog:
    """Hierarchical place catalog for one country."""

    cities: tuple[City, ...] = ()
    generic: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "PlaceCatalog":
        return cls(
            cities=tuple(City.from_dict(c) for c in data.get("cities") or ()),
            generic={key: _as_pool(value) for key, value in (data.get("generic") or {}).items()},
        )

    def find_city(self, name: str) -> Optional[City]:
        return next((c for c in self.cities if c.name == name), None)

    def city_names(self, size: Optional[str] = None) -> tuple[str, ...]:
        """City names, restricted to a size when any city of that size exists."""
        names = tuple(c.name for c in self.cities if size is None or c.size == size)
        if not names and size is not None:
            logger.debug(f"No '{size}' cities, using every city")
            names = tuple(c.name for c in self.cities)
        return names or self.generic.get("cities", ())

    def generic_for(self, category: str) -> tuple[str, ...]:
        if category == CITY_CATEGORY:
            return self.city_names()
        return self.generic.get(category_key(category), ())


@dataclass(frozen=True)
class CountryContext:
    """Everything needed to localize markers for one destination country."""

    country: Country
    names: NamePool
    places: PlaceCatalog
    events: tuple[ComparableEvent, ...] = ()

    @property
    def code(self) -> str:
        return self.country.code

    @property
    def population(self) -> int:
        return self.country.population


class ReferenceData:
    """
    Read-only provider for country reference tables.

    Loaded once per process; every translation request reads from the same
    instance and nothing mutates it after construction.
    """

    def __init__(
        self,
        countries: dict[str, Country],
        names: dict[str, NamePool],
        places: dict[str, PlaceCatalog],
        events: dict[str, tuple[ComparableEvent, ...]],
        default_country: str = "US",
    ):
        """
        Initialize the provider.

        Args:
            countries: Country records by code.
            names: Name pools by country code.
            places: Place catalogs by country code.
            events: Comparable events by country code.
            default_country: Country used when a requested code has no data.
        """
        if default_country not in countries:
            raise ValueError(f"Default country {default_country} missing from countries table")
        self._countries = countries
        self._names = names
        self._places = places
        self._events = events
        self.default_country = default_country

    @classmethod
    def from_dicts(
        cls,
        countries: list[dict],
        names: dict,
        places: dict,
        events: Optional[dict] = None,
        default_country: str = "US",
    ) -> "ReferenceData":
        """Build the provider from already-parsed YAML structures."""
        events = events or {}
        return cls(
            countries={c["code"]: Country.from_dict(c) for c in countries},
            names={code: NamePool.from_dict(pool or {}) for code, pool in names.items()},
            places={code: PlaceCatalog.from_dict(cat or {}) for code, cat in places.items()},
            events={
                code: tuple(
                    ComparableEvent(
                        id=e["id"],
                        name=e["name"],
                        category=e.get("category", "any"),
                        casualties=int(e["casualties"]),
                        year=e.get("year"),
                        country=code,
                    )
                    for e in (items or ())
                )
                for code, items in events.items()
            },
            default_country=default_country,
        )

    @classmethod
    def from_directory(cls, path: str | Path, default_country: str = "US") -> "ReferenceData":
        """Load the four reference YAML files from a directory."""
        path = Path(path)
        if not path.is_dir():
            raise FileNotFoundError(f"Reference data directory not found: {path}")

        countries = _load_yaml(path / COUNTRIES_FILE)
        countries = countries.get("countries", []) if isinstance(countries, dict) else countries
        names = _load_yaml(path / NAMES_FILE)
        places = _load_yaml(path / PLACES_FILE)
        events_path = path / EVENTS_FILE
        events = _load_yaml(events_path) if events_path.exists() else {}

        data = cls.from_dicts(countries, names, places, events, default_country)
        logger.info(
            f"Loaded reference data for {len(data._countries)} countries "
            f"({sum(len(e) for e in data._events.values())} comparable events) from {path}"
        )
        return data

    @property
    def country_codes(self) -> list[str]:
        return list(self._countries)

    def has_country(self, code: str) -> bool:
        return code in self._countries

    def country(self, code: str) -> Optional[Country]:
        return self._countries.get(code)

    def names_for(self, code: str) -> Optional[NamePool]:
        return self._names.get(code)

    def places_for(self, code: str) -> Optional[PlaceCatalog]:
        return self._places.get(code)

    def events_for(self, code: str) -> tuple[ComparableEvent, ...]:
        return self._events.get(code, ())

    def context_for(self, code: str) -> CountryContext:
        """
        Build the context for a destination country.

        Unknown countries fall back to the default country. Missing name or
        place tables fall back to the default country's tables; missing
        comparable events mean no comparison is offered.
        """
        if code not in self._countries:
            logger.warning(f"No reference data for country {code}, using {self.default_country}")
            code = self.default_country

        return CountryContext(
            country=self._countries[code],
            names=self._names.get(code) or self._names.get(self.default_country, NamePool()),
            places=self._places.get(code) or self._places.get(self.default_country, PlaceCatalog()),
            events=self._events.get(code, ()),
        )


def _load_yaml(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"Reference data file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
