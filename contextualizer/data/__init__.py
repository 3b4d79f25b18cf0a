"""Reference data and story loading."""

from .documents import DocumentStore, load_document
from .reference import CountryContext, ReferenceData

__all__ = ["CountryContext", "DocumentStore", "ReferenceData", "load_document"]
