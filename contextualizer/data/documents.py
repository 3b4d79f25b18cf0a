"""Story loading from YAML files."""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

import yaml

from ..models import Document

logger = logging.getLogger(__name__)

STORY_FILENAME = "story.yaml"


class DocumentStore:
    """
    In-memory collection of stories.

    Stories are looked up by id or slug. Loaded once; documents are
    immutable afterwards.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: dict[str, Document] = {}
        self._slugs: dict[str, str] = {}
        for document in documents:
            self.add(document)

    @classmethod
    def from_directory(cls, path: str | Path) -> "DocumentStore":
        """
        Load stories from a directory.

        Accepts both `<slug>/story.yaml` folders and flat `<slug>.yaml` files.
        """
        path = Path(path)
        if not path.is_dir():
            raise FileNotFoundError(f"Stories directory not found: {path}")

        files = sorted(path.glob(f"*/{STORY_FILENAME}")) + sorted(path.glob("*.yaml"))
        store = cls()
        for story_path in files:
            store.add(load_document(story_path))

        logger.info(f"Loaded {len(store)} stories from {path}")
        return store

    def add(self, document: Document) -> None:
        if document.id in self._documents:
            raise ValueError(f"Duplicate story id: {document.id}")
        self._documents[document.id] = document
        if document.slug:
            self._slugs[document.slug] = document.id

    def get(self, id_or_slug: str) -> Optional[Document]:
        doc_id = self._slugs.get(id_or_slug, id_or_slug)
        return self._documents.get(doc_id)

    @property
    def ids(self) -> list[str]:
        return list(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)


def load_document(path: str | Path) -> Document:
    """Load a single story YAML file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if "slug" not in data:
        data["slug"] = path.parent.name if path.name == STORY_FILENAME else path.stem
    if "id" not in data:
        data["id"] = data["slug"]
    return Document.from_dict(data)
