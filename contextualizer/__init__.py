"""Contextualizer - Render stories in the context of a destination country."""

__version__ = "0.1.0"

from .pipeline import TranslationPipeline, TranslatedDocument
from .config import Config, ComparisonConfig, DataConfig, OutputConfig, SelectionConfig, SourceConfig
from .errors import (
    ContextualizationError,
    EmptyCandidatePool,
    ErrorType,
    MalformedDocument,
    UnknownMarkerKey,
    UnresolvedReference,
)
from .models import DisplaySegment, Document, ResolvedValue
from .parser import tokenize

__all__ = [
    "TranslationPipeline",
    "TranslatedDocument",
    "Config",
    "ComparisonConfig",
    "DataConfig",
    "OutputConfig",
    "SelectionConfig",
    "SourceConfig",
    "ContextualizationError",
    "EmptyCandidatePool",
    "ErrorType",
    "MalformedDocument",
    "UnknownMarkerKey",
    "UnresolvedReference",
    "DisplaySegment",
    "Document",
    "ResolvedValue",
    "tokenize",
]
