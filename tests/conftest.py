"""Shared fixtures: small in-memory reference data and stories."""

import copy

import pytest

from contextualizer.config import Config, DataConfig, OutputConfig, SourceConfig
from contextualizer.data import DocumentStore, ReferenceData
from contextualizer.models import Document
from contextualizer.pipeline import TranslationPipeline
from contextualizer.resolvers import MarkerResolver

# Source country population is 1,000,000 so US (2x) and FR (0.5x) scale cleanly
COUNTRIES = [
    {
        "code": "IR",
        "name": "Iran",
        "population": 1_000_000,
        "currency": "IRR",
        "currency-symbol": "Rial",
        "currency-format": "{amount} {symbol}",
        "conversion-rate": 1.0,
        "languages": ["fa", "en"],
    },
    {
        "code": "US",
        "name": "United States",
        "population": 2_000_000,
        "currency": "USD",
        "currency-symbol": "$",
        "currency-format": "{symbol}{amount}",
        "conversion-rate": 0.001,
        "languages": ["en"],
    },
    {
        "code": "FR",
        "name": "France",
        "population": 500_000,
        "currency": "EUR",
        "currency-symbol": "€",
        "currency-format": "{amount} {symbol}",
        "conversion-rate": 0.002,
        "languages": ["fr"],
    },
    {
        # No name, place or event tables: borrows the default country's
        "code": "XX",
        "name": "Nowhere",
        "population": 1_000_000,
        "currency": "XXX",
        "currency-symbol": "¤",
    },
]

NAMES = {
    "IR": {"male": ["Reza"], "female": ["Zahra"], "neutral": ["Arya"]},
    "US": {
        "male": ["James", "Michael", "David"],
        "female": ["Emily", "Sarah", "Megan"],
        "neutral": ["Alex", "Jordan"],
    },
    "FR": {"male": ["Lucas"], "female": ["Camille"], "neutral": []},
}

PLACES = {
    "IR": {
        "cities": [
            {
                "name": "Tehran",
                "size": "large",
                "population": 9_000_000,
                "landmarks": {"protest": ["Azadi Square"]},
            }
        ],
        "generic": {"prisons": ["Evin Prison"]},
    },
    "US": {
        "cities": [
            {
                "name": "Springfield",
                "size": "large",
                "population": 150_000,
                "landmarks": {"protest": ["Main Square"]},
                "hospitals": ["Springfield General"],
            },
            {
                "name": "Shelbyville",
                "size": "small",
                "population": 20_000,
                "landmarks": ["Old Mill"],
            },
        ],
        "generic": {
            "cities": ["Capital City"],
            "landmarks": ["Town Green"],
            "prisons": ["County Jail"],
            "hospitals": ["County Hospital"],
            "universities": ["State University"],
        },
    },
    "FR": {
        "cities": [
            {
                "name": "Paris",
                "size": "large",
                "population": 2_000_000,
                "landmarks": ["Place de la République"],
            }
        ],
        "generic": {"prisons": ["La Santé"]},
    },
}

EVENTS = {
    "US": [
        {"id": 1, "name": "the Harbor fire", "category": "disaster", "casualties": 200, "year": 1990},
        {"id": 2, "name": "the Bridge collapse", "category": "disaster", "casualties": 600, "year": 2007},
        {"id": 3, "name": "the Square shooting", "category": "shooting", "casualties": 60, "year": 2001},
    ],
}

STORY = {
    "id": "story-a",
    "slug": "story-a",
    "title": "{{victim}} dies in {{capital}}",
    "summary": "A {{victim:age}}-year-old was detained at {{square}}.",
    "content": (
        "{{victim}} was detained by {{police}} on {{arrest-date}}.{{source:s1}}\n\n"
        "{{image:photo}}\n"
        "Security forces killed {{deaths}}, {{deaths:comparable}}. "
        "Families paid {{fine}} to {{official}}."
    ),
    "markers": {
        "victim": {"person": "Mahsa", "gender": "female", "age": 22},
        "official": {"gender": "male"},
        "capital": {"place": "Tehran", "category": "city", "size": "large"},
        "square": {"place": "Azadi Square", "category": "landmark", "within": "capital"},
        "police": {"occupation": "morality police", "examples": ["vice squad", "riot police"]},
        "arrest-date": {"date": "2022-09-13"},
        "deaths": {"casualties": 100, "killed": True},
        "fine": {"currency": 1_000_000, "base-currency": "IRR"},
    },
    "sources": [{"id": "s1", "number": 1, "title": "Report", "url": "https://example.org/report"}],
    "images": [
        {
            "id": "photo",
            "src": "/img/photo.jpg",
            "alt": "A vigil",
            "caption": "Vigil",
            "content-warning": "Graphic",
        }
    ],
    "date": "2022-09-16",
    "severity": "critical",
    "verified": True,
    "tags": ["protest"],
    "source": "Example News",
}

OTHER_STORY = {
    "id": "story-b",
    "title": "{{victim}} speaks",
    "summary": "",
    "content": "{{victim}} was released.",
    "markers": {"victim": {"person": "Nika", "gender": "female"}},
}


@pytest.fixture
def config(tmp_path):
    """Config with a source population of one million."""
    return Config(
        data=DataConfig(default_country="US"),
        source=SourceConfig(country="IR", population=1_000_000, currency="IRR", demonym="Iranian"),
        output=OutputConfig(output_dir=tmp_path / "output"),
    )


@pytest.fixture
def reference():
    return ReferenceData.from_dicts(COUNTRIES, NAMES, PLACES, EVENTS, default_country="US")


@pytest.fixture
def story():
    return Document.from_dict(copy.deepcopy(STORY))


@pytest.fixture
def documents():
    return DocumentStore(
        [Document.from_dict(copy.deepcopy(STORY)), Document.from_dict(copy.deepcopy(OTHER_STORY))]
    )


@pytest.fixture
def resolver(config, reference):
    return MarkerResolver(config, reference)


@pytest.fixture
def pipeline(config, reference, documents):
    return TranslationPipeline(config, reference=reference, documents=documents)


@pytest.fixture
def make_document():
    """Factory for single-purpose documents."""

    def _make(markers=None, content="", title="", summary="", doc_id="doc", **extra):
        data = {
            "id": doc_id,
            "title": title,
            "summary": summary,
            "content": content,
            "markers": markers or {},
        }
        data.update(extra)
        return Document.from_dict(data)

    return _make
