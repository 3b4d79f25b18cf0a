"""Translation pipeline: single requests and batch generation."""

import json
import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd
from tqdm import tqdm

from .assembler import SegmentAssembler, count_originals, reveal_offsets
from .config import Config
from .data import DocumentStore, ReferenceData
from .errors import ContextualizationError
from .models import DisplaySegment, Document
from .resolvers import MarkerResolver

logger = logging.getLogger(__name__)

REPORT_FILENAME = "report.csv"
UNKNOWN_STORY = "UNKNOWN_STORY"

# Pipeline built once per worker process by _init_worker
_worker_pipeline: Optional["TranslationPipeline"] = None


@dataclass
class TranslatedDocument:
    """A document rendered for one country and language."""

    id: str
    slug: str
    country: str
    language: str
    contextualized: bool
    title: list[DisplaySegment] = field(default_factory=list)
    summary: list[DisplaySegment] = field(default_factory=list)
    content: list[DisplaySegment] = field(default_factory=list)
    date: Optional[str] = None
    tags: tuple[str, ...] = ()
    hashtags: Optional[str] = None
    severity: Optional[str] = None
    verified: bool = False
    source: Optional[str] = None
    content_warning: Optional[str] = None
    image: Optional[str] = None

    @property
    def segments(self) -> list[DisplaySegment]:
        return self.title + self.summary + self.content

    @property
    def section_offsets(self) -> list[int]:
        """Start counts of the title, summary and content reveal sequences."""
        return reveal_offsets([self.title, self.summary, self.content])

    def to_dict(self) -> dict:
        """Convert to the JSON document consumed by the rendering layer."""
        return {
            "id": self.id,
            "slug": self.slug,
            "title": [s.to_dict() for s in self.title],
            "summary": [s.to_dict() for s in self.summary],
            "content": [s.to_dict() for s in self.content],
            "metadata": {
                "country": self.country,
                "language": self.language,
                "contextualized": self.contextualized,
            },
            "date": self.date,
            "tags": list(self.tags),
            "hashtags": self.hashtags,
            "severity": self.severity,
            "verified": self.verified,
            "source": self.source,
            "content-warning": self.content_warning,
            "image": self.image,
        }


def _init_worker(config_dict: dict, reference: ReferenceData, documents: DocumentStore) -> None:
    """Build the per-process pipeline. Must be module-level for pickling."""
    global _worker_pipeline
    _worker_pipeline = TranslationPipeline(Config(**config_dict), reference=reference, documents=documents)


def _translate_worker(job: tuple[str, str, str]) -> dict:
    """Translate one (story, country, language) job in a worker process."""
    return _worker_pipeline.run_job(*job)


class TranslationPipeline:
    """
    Renders stories for destination countries.

    Reference data and stories are loaded once; each translate() call
    builds its own request context, so calls are independent.
    """

    def __init__(
        self,
        config: Config,
        reference: Optional[ReferenceData] = None,
        documents: Optional[DocumentStore] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration.
            reference: Reference data; loaded from config.data.contexts_dir when omitted.
            documents: Story store; loaded from config.data.stories_dir when omitted.
        """
        self.config = config
        if reference is None:
            reference = ReferenceData.from_directory(
                config.data.contexts_dir, config.data.default_country
            )
        if documents is None:
            documents = DocumentStore.from_directory(config.data.stories_dir)
        self.reference = reference
        self.documents = documents
        self.resolver = MarkerResolver(config, reference)
        self.assembler = SegmentAssembler(self.resolver)

    def translate(
        self,
        document_id: str,
        country_code: str,
        language: str = "en",
        contextualize: bool = True,
        inline_comparisons: Optional[bool] = None,
    ) -> TranslatedDocument:
        """
        Translate a stored story.

        Args:
            document_id: Story id or slug.
            country_code: Destination country code.
            language: Request language, used for number and date formatting.
            contextualize: Substitute destination values when True.
            inline_comparisons: Override config.comparison.inline.

        Returns:
            The translated document.

        Raises:
            KeyError: If no story has this id or slug.
            ContextualizationError: On any fatal resolution error.
        """
        document = self.documents.get(document_id)
        if document is None:
            raise KeyError(f"Unknown story: {document_id}")
        return self.translate_document(
            document, country_code, language, contextualize, inline_comparisons
        )

    def translate_document(
        self,
        document: Document,
        country_code: str,
        language: str = "en",
        contextualize: bool = True,
        inline_comparisons: Optional[bool] = None,
    ) -> TranslatedDocument:
        """Translate an in-memory document."""
        if inline_comparisons is None:
            inline_comparisons = self.config.comparison.inline

        ctx = self.resolver.context(document, country_code, language, contextualize)
        title = self.assembler.assemble_text(document.title, ctx, inline_comparisons)
        summary = self.assembler.assemble_text(document.summary, ctx, inline_comparisons)
        content = self.assembler.assemble_text(document.content, ctx, inline_comparisons)

        return TranslatedDocument(
            id=document.id,
            slug=document.slug or document.id,
            country=ctx.country.code,
            language=language,
            contextualized=contextualize,
            title=title,
            summary=summary,
            content=content,
            date=document.date,
            tags=document.tags,
            hashtags=document.hashtags,
            severity=document.severity,
            verified=document.verified,
            source=document.attribution,
            content_warning=document.content_warning,
            image=document.image,
        )

    def jobs(self) -> list[tuple[str, str, str]]:
        """All (story id, country, language) combinations to generate."""
        output = self.config.output
        if output.stories:
            story_ids = []
            for story in output.stories:
                document = self.documents.get(story)
                if document is None:
                    logger.warning(f"Skipping unknown story: {story}")
                    continue
                story_ids.append(document.id)
        else:
            story_ids = self.documents.ids

        countries = output.countries or self.reference.country_codes

        jobs = []
        for story_id in story_ids:
            for code in countries:
                country = self.reference.country(code)
                if output.languages:
                    languages = output.languages
                elif country is not None:
                    languages = country.languages
                else:
                    languages = ["en"]
                for language in languages:
                    jobs.append((story_id, code, language))
        return jobs

    def run_job(self, document_id: str, country_code: str, language: str) -> dict:
        """
        Translate one combination and write its JSON file.

        Returns:
            Report row for the combination.
        """
        row = {
            "story": document_id,
            "country": country_code,
            "language": language,
            "status": "ok",
            "error_type": None,
            "message": None,
            "segments": 0,
            "originals": 0,
            "path": None,
        }
        try:
            result = self.translate(
                document_id, country_code, language, self.config.output.contextualize
            )
        except ContextualizationError as e:
            logger.error(e.to_log_message())
            row.update(status="error", error_type=e.error_type.value, message=e.message)
            return row
        except KeyError as e:
            message = str(e.args[0])
            logger.error(message)
            row.update(status="error", error_type=UNKNOWN_STORY, message=message)
            return row

        out_dir = Path(self.config.output.output_dir) / result.slug
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / f"{language}-{country_code}.json"
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

        row.update(
            segments=len(result.segments),
            originals=count_originals(result.segments),
            path=str(out_path),
        )
        return row

    def run(self) -> int:
        """
        Generate every configured combination.

        Returns:
            Number of combinations rendered without error.
        """
        output_dir = Path(self.config.output.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        jobs = self.jobs()
        logger.info(
            f"Translating {len(self.documents)} stories into {len(jobs)} "
            f"story/country/language combinations"
        )

        if self.config.workers <= 1:
            rows = [self.run_job(*job) for job in tqdm(jobs, desc="Translating")]
        else:
            rows = self._run_parallel(jobs)

        succeeded = sum(1 for row in rows if row["status"] == "ok")
        logger.info(f"Pipeline complete. {succeeded}/{len(rows)} combinations rendered")

        if self.config.output.save_report:
            report_path = output_dir / REPORT_FILENAME
            columns = ["story", "country", "language", "status", "error_type", "message",
                       "segments", "originals", "path"]
            pd.DataFrame(rows, columns=columns).to_csv(report_path, index=False)
            logger.info(f"Report written to {report_path}")

        return succeeded

    def _run_parallel(self, jobs: list[tuple[str, str, str]]) -> list[dict]:
        """Run jobs in worker processes, keeping the job order in the report.

        Workers receive the already loaded reference data and stories, so
        injected data is used the same way as in the sequential path.
        """
        workers = self.config.workers
        config_dict = self.config.model_dump(mode="json")
        results: dict[int, dict] = {}

        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(config_dict, self.reference, self.documents),
        ) as executor:
            futures = {
                executor.submit(_translate_worker, job): index for index, job in enumerate(jobs)
            }
            for future in tqdm(
                as_completed(futures), total=len(jobs), desc=f"Translating ({workers} workers)"
            ):
                results[futures[future]] = future.result()

        return [results[index] for index in range(len(jobs))]
