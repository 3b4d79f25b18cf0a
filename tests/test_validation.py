"""Tests for data validation, run against both fixtures and the shipped data."""

from pathlib import Path

import pytest

from contextualizer.cli import main
from contextualizer.config import Config, DataConfig
from contextualizer.data import DocumentStore, ReferenceData
from contextualizer.parser import IMAGE_KEY, SOURCE_KEY, marker_references
from contextualizer.pipeline import TranslationPipeline
from contextualizer.resolvers import MarkerResolver
from contextualizer.validation import (
    ERROR,
    WARNING,
    validate_all,
    validate_document,
    validate_reference,
)

REPO_ROOT = Path(__file__).resolve().parent.parent
SHIPPED_CONTEXTS = REPO_ROOT / "data" / "contexts"
SHIPPED_STORIES = REPO_ROOT / "data" / "stories"


@pytest.fixture(scope="module")
def shipped_reference():
    return ReferenceData.from_directory(SHIPPED_CONTEXTS, default_country="US")


@pytest.fixture(scope="module")
def shipped_documents():
    return DocumentStore.from_directory(SHIPPED_STORIES)


def errors(issues):
    return [issue for issue in issues if issue.severity == ERROR]


class TestShippedData:
    """The data under data/ must always pass validation."""

    def test_stories_loaded(self, shipped_documents):
        assert len(shipped_documents) >= 3
        assert shipped_documents.get("mahsa-amini") is not None
        assert shipped_documents.get("wage-arrears") is not None

    def test_every_reference_resolves(self, shipped_documents):
        for document in shipped_documents:
            for field_name in ("title", "summary", "content"):
                for key, suffix in marker_references(getattr(document, field_name)):
                    if key == SOURCE_KEY:
                        assert document.find_source(suffix) is not None, (document.id, suffix)
                    elif key == IMAGE_KEY:
                        assert document.find_image(suffix) is not None, (document.id, suffix)
                    else:
                        assert key in document.markers, (document.id, key)

    def test_no_validation_errors(self, shipped_reference, shipped_documents):
        resolver = MarkerResolver(Config(), shipped_reference)
        issues = validate_all(shipped_reference, shipped_documents, resolver)
        assert errors(issues) == []

    def test_translates_into_every_country(self, shipped_reference, shipped_documents):
        config = Config(data=DataConfig(contexts_dir=SHIPPED_CONTEXTS, stories_dir=SHIPPED_STORIES))
        pipeline = TranslationPipeline(config, reference=shipped_reference, documents=shipped_documents)
        for document in shipped_documents:
            for code in shipped_reference.country_codes:
                country = shipped_reference.country(code)
                for language in country.languages:
                    result = pipeline.translate(document.id, code, language=language)
                    assert result.content

    def test_cli_validate(self):
        assert main(["validate", "--contexts", str(SHIPPED_CONTEXTS), "--stories", str(SHIPPED_STORIES)]) == 0

    def test_cli_translate(self, tmp_path):
        out = tmp_path / "mahsa.json"
        code = main(
            [
                "translate",
                "mahsa-amini",
                "--country",
                "FR",
                "--contexts",
                str(SHIPPED_CONTEXTS),
                "--stories",
                str(SHIPPED_STORIES),
                "--output",
                str(out),
            ]
        )
        assert code == 0
        assert out.exists()

    def test_cli_translate_unknown_story(self):
        code = main(
            [
                "translate",
                "missing",
                "--country",
                "US",
                "--contexts",
                str(SHIPPED_CONTEXTS),
                "--stories",
                str(SHIPPED_STORIES),
            ]
        )
        assert code == 1


class TestValidateDocument:
    """Tests for story checks."""

    def test_fixture_story_is_clean(self, story):
        assert errors(validate_document(story)) == []

    def test_within_non_city(self, make_document):
        document = make_document(
            {
                "victim": {"person": "Mahsa", "gender": "female"},
                "square": {"place": "Azadi Square", "category": "landmark", "within": "victim"},
            },
            content="{{victim}} at {{square}}",
        )
        issues = errors(validate_document(document))
        assert len(issues) == 1
        assert "not a city" in issues[0].issue

    def test_unknown_source_and_image(self, make_document):
        document = make_document({}, content="Cited.{{source:nope}}{{image:none}}")
        assert len(errors(validate_document(document))) == 2

    def test_unknown_key(self, make_document):
        document = make_document({}, content="{{ghost}}")
        issues = errors(validate_document(document))
        assert "ghost" in issues[0].issue

    def test_unknown_modifier_and_missing_age(self, make_document):
        document = make_document(
            {"victim": {"person": "Mahsa", "gender": "female"}},
            content="{{victim:shoesize}} {{victim:age}}",
        )
        assert len(errors(validate_document(document))) == 2

    def test_unused_marker_warning(self, make_document):
        document = make_document({"spare": {"number": 3}}, content="Nothing here.")
        issues = validate_document(document)
        assert [issue.severity for issue in issues] == [WARNING]

    def test_city_used_only_through_within(self, make_document):
        document = make_document(
            {
                "capital": {"place": "Tehran", "category": "city"},
                "square": {"place": "Azadi Square", "category": "landmark", "within": "capital"},
            },
            content="At {{square}}.",
        )
        assert validate_document(document) == []


class TestValidateReference:
    """Tests for reference table checks."""

    def test_empty_gender_pool_is_error(self, reference):
        issues = errors(validate_reference(reference))
        assert any("FR: No neutral names" in issue.issue for issue in issues)

    def test_missing_tables_are_warnings(self, reference):
        issues = validate_reference(reference)
        xx = [issue for issue in issues if issue.issue.startswith("XX")]
        assert xx
        assert all(issue.severity == WARNING for issue in xx)
