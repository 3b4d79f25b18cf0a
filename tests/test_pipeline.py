"""End-to-end tests for the translation pipeline."""

import json

import pandas as pd
import pytest

from contextualizer.assembler import display_text, original_text
from contextualizer.data import DocumentStore
from contextualizer.errors import MalformedDocument, UnknownMarkerKey
from contextualizer.pipeline import TranslationPipeline


class TestTranslate:
    """Tests for single translation requests."""

    @pytest.mark.parametrize("country", ["US", "FR", "IR", "XX"])
    def test_round_trip(self, pipeline, country):
        plain = pipeline.translate("story-a", country, contextualize=False)
        translated = pipeline.translate("story-a", country)
        for section in ("title", "summary", "content"):
            assert display_text(getattr(plain, section)) == original_text(getattr(translated, section))

    def test_uncontextualized_text(self, pipeline):
        result = pipeline.translate("story-a", "US", contextualize=False)
        assert display_text(result.title) == "Mahsa dies in Tehran"
        assert display_text(result.summary) == "A 22-year-old was detained at Azadi Square."
        assert all(s.original is None for s in result.segments)

    def test_contextualized_text(self, pipeline):
        result = pipeline.translate("story-a", "US")
        title = display_text(result.title)
        assert title.endswith(" dies in Springfield")
        assert display_text(result.summary) == "A 22-year-old was detained at Main Square."
        assert "Security forces killed 200, approximately as many as the Harbor fire." in display_text(
            result.content
        )
        assert "Families paid $1,000 to " in display_text(result.content)

    def test_same_marker_same_value_across_sections(self, pipeline):
        result = pipeline.translate("story-a", "US")
        victims = [s.text for s in result.segments if s.key == "victim" and s.type == "person"]
        # title, content; the summary only carries the age
        assert len(victims) == 2
        assert len(set(victims)) == 1
        ages = [s.text for s in result.segments if s.key == "victim" and s.type == "age"]
        assert ages == ["22"]

    def test_deterministic(self, pipeline):
        first = pipeline.translate("story-a", "US").to_dict()
        second = pipeline.translate("story-a", "US").to_dict()
        assert first == second

    def test_lookup_by_slug(self, pipeline, make_document):
        pipeline.documents.add(make_document({}, title="Plain", doc_id="doc-9", slug="plain-story"))
        assert pipeline.translate("plain-story", "US").id == "doc-9"

    def test_unknown_story(self, pipeline):
        with pytest.raises(KeyError):
            pipeline.translate("missing", "US")

    def test_unknown_country_falls_back(self, pipeline):
        result = pipeline.translate("story-a", "ZZ")
        assert result.country == "US"

    def test_reveal_offsets(self, pipeline):
        result = pipeline.translate("story-a", "US")
        # title: victim + capital; summary: square
        assert result.section_offsets == [0, 2, 3]

    def test_inline_comparisons_flag(self, pipeline):
        result = pipeline.translate("story-a", "US", inline_comparisons=True)
        kinds = [s.kind for s in result.content]
        deaths = next(i for i, s in enumerate(result.content) if s.key == "deaths")
        assert kinds[deaths + 1] == "comparison"

    def test_to_dict(self, pipeline):
        data = pipeline.translate("story-a", "FR", language="fr").to_dict()
        assert data["id"] == "story-a"
        assert data["slug"] == "story-a"
        assert data["metadata"] == {"country": "FR", "language": "fr", "contextualized": True}
        assert data["date"] == "2022-09-16"
        assert data["severity"] == "critical"
        assert data["verified"] is True
        assert data["tags"] == ["protest"]
        assert data["source"] == "Example News"
        assert set(data["title"][0]) >= {"text", "original", "type", "key"}
        json.dumps(data)

    def test_malformed_document(self, pipeline, make_document):
        document = make_document({}, content="Broken {{marker")
        with pytest.raises(MalformedDocument) as exc:
            pipeline.translate_document(document, "US")
        assert exc.value.document_id == "doc"

    def test_unknown_marker(self, pipeline, make_document):
        document = make_document({}, title="{{ghost}}")
        with pytest.raises(UnknownMarkerKey) as exc:
            pipeline.translate_document(document, "US")
        assert exc.value.key == "ghost"
        assert exc.value.document_id == "doc"

    def test_global_scope_across_documents(self, config, reference, documents):
        config.selection.scope = "global"
        pipeline = TranslationPipeline(config, reference=reference, documents=documents)
        first = pipeline.translate("story-a", "US").title[0]
        second = pipeline.translate("story-b", "US").title[0]
        assert first.key == second.key == "victim"
        assert first.text == second.text


class TestBatchRun:
    """Tests for batch generation."""

    def test_jobs_default_languages(self, pipeline):
        jobs = pipeline.jobs()
        # IR has two languages, US, FR and XX one each
        assert len(jobs) == 2 * 5
        assert ("story-a", "IR", "fa") in jobs
        assert ("story-a", "FR", "fr") in jobs
        assert ("story-b", "XX", "en") in jobs

    def test_run_writes_outputs_and_report(self, config, reference, documents, make_document):
        documents.add(make_document({}, content="{{ghost}}", doc_id="broken"))
        config.output.countries = ["US", "FR"]
        config.output.languages = ["en"]
        pipeline = TranslationPipeline(config, reference=reference, documents=documents)

        succeeded = pipeline.run()

        assert succeeded == 4
        output_dir = config.output.output_dir
        with open(output_dir / "story-a" / "en-US.json", encoding="utf-8") as f:
            data = json.load(f)
        assert data["metadata"]["country"] == "US"
        assert (output_dir / "story-b" / "en-FR.json").exists()
        assert not (output_dir / "broken").exists()

        report = pd.read_csv(output_dir / "report.csv")
        assert len(report) == 6
        errors = report[report["status"] == "error"]
        assert len(errors) == 2
        assert set(errors["error_type"]) == {"UNKNOWN_MARKER_KEY"}
        assert set(errors["story"]) == {"broken"}

    def test_run_parallel_uses_loaded_data(self, config, reference, documents, make_document):
        documents.add(make_document({}, content="{{ghost}}", doc_id="broken"))
        config.output.countries = ["US", "FR"]
        config.output.languages = ["en"]
        config.workers = 2
        pipeline = TranslationPipeline(config, reference=reference, documents=documents)

        assert pipeline.run() == 4

        output_dir = config.output.output_dir
        assert (output_dir / "story-a" / "en-US.json").exists()
        assert (output_dir / "story-b" / "en-FR.json").exists()
        report = pd.read_csv(output_dir / "report.csv")
        assert list(zip(report["story"], report["country"])) == [
            (story, country) for story, country, _ in pipeline.jobs()
        ]
        assert list(report["status"]) == ["ok", "ok", "ok", "ok", "error", "error"]

    def test_run_job_unknown_story(self, pipeline):
        row = pipeline.run_job("missing", "US", "en")
        assert row["status"] == "error"
        assert row["error_type"] == "UNKNOWN_STORY"
        assert "missing" in row["message"]

    def test_run_selected_stories(self, config, reference, documents):
        config.output.stories = ["story-b", "missing"]
        config.output.countries = ["US"]
        config.output.save_report = False
        pipeline = TranslationPipeline(config, reference=reference, documents=documents)

        assert pipeline.run() == 1
        assert not (config.output.output_dir / "report.csv").exists()

    def test_run_uncontextualized(self, config, reference, documents):
        config.output.countries = ["US"]
        config.output.contextualize = False
        pipeline = TranslationPipeline(config, reference=reference, documents=documents)
        pipeline.run()

        with open(config.output.output_dir / "story-b" / "en-US.json", encoding="utf-8") as f:
            data = json.load(f)
        assert data["metadata"]["contextualized"] is False
        assert data["title"][0]["text"] == "Nika"


def test_store_rejects_duplicate_ids(story):
    store = DocumentStore([story])
    with pytest.raises(ValueError):
        store.add(story)
