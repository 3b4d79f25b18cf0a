"""
Error taxonomy for marker translation.

Every fatal failure raised by the core derives from ContextualizationError
so that batch callers can catch per document/country and continue.
"""

from enum import Enum
from typing import Optional


class ErrorType(str, Enum):
    """Machine-interpretable error types."""

    MALFORMED_DOCUMENT = "MALFORMED_DOCUMENT"
    """Unmatched or invalid marker delimiters in document text."""

    UNKNOWN_MARKER_KEY = "UNKNOWN_MARKER_KEY"
    """Document text references a key absent from its marker table."""

    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    """Bad `within`/`same-as` reference, missing source/image id, or unknown modifier."""

    EMPTY_CANDIDATE_POOL = "EMPTY_CANDIDATE_POOL"
    """Country reference data has no entries for the requested category/gender."""


class ContextualizationError(Exception):
    """Base class for fatal translation errors."""

    error_type: ErrorType

    def __init__(self, message: str, document_id: Optional[str] = None):
        self.message = message
        self.document_id = document_id
        super().__init__(self.to_log_message())

    def to_log_message(self) -> str:
        """Format error for logging."""
        loc = f"doc:{self.document_id}" if self.document_id else "doc:?"
        return f"[{self.error_type.value}] {loc}: {self.message}"


class MalformedDocument(ContextualizationError):
    """Document text cannot be tokenized."""

    error_type = ErrorType.MALFORMED_DOCUMENT

    def __init__(self, reason: str, snippet: str = "", document_id: Optional[str] = None):
        self.reason = reason
        self.snippet = snippet
        message = f"{reason} near {snippet!r}" if snippet else reason
        super().__init__(message, document_id)


class UnknownMarkerKey(ContextualizationError):
    """Marker key has no definition."""

    error_type = ErrorType.UNKNOWN_MARKER_KEY

    def __init__(self, key: str, document_id: Optional[str] = None):
        self.key = key
        super().__init__(f"unknown marker key '{key}'", document_id)


class UnresolvedReference(ContextualizationError):
    """A marker points at something that does not exist or has the wrong shape."""

    error_type = ErrorType.UNRESOLVED_REFERENCE

    def __init__(
        self,
        key: str,
        reference: Optional[str],
        reason: str,
        document_id: Optional[str] = None,
    ):
        self.key = key
        self.reference = reference
        self.reason = reason
        target = f" -> '{reference}'" if reference else ""
        super().__init__(f"marker '{key}'{target}: {reason}", document_id)


class EmptyCandidatePool(ContextualizationError):
    """No reference entries to choose from."""

    error_type = ErrorType.EMPTY_CANDIDATE_POOL

    def __init__(self, country: str, category: str, document_id: Optional[str] = None):
        self.country = country
        self.category = category
        super().__init__(f"no '{category}' entries for country {country}", document_id)
