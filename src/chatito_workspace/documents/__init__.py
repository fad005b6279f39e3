"""Document model and store."""

from __future__ import annotations

from .defaults import default_documents
from .model import DEFAULT_DOCUMENT_TITLE, DOCUMENT_SUFFIX, Document
from .store import DocumentStore

__all__ = [
    "DEFAULT_DOCUMENT_TITLE",
    "DOCUMENT_SUFFIX",
    "Document",
    "DocumentStore",
    "default_documents",
]
