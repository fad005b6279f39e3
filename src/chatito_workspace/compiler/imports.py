"""Cross-document import resolution by document title."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from ..documents.model import Document
from ..errors import ImportNotFound

__all__ = ["ResolvedImport", "ImportResolver", "normalize_import_path"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ResolvedImport:
    """An imported document's text.

    ``resolved_path`` is always empty: no filesystem backs the workspace.
    """

    resolved_path: str
    text: str

    # Adapter-facing aliases matching the ``{filePath, dsl}`` callback shape.
    @property
    def file_path(self) -> str:
        return self.resolved_path

    @property
    def dsl(self) -> str:
        return self.text


def normalize_import_path(import_path: str) -> str:
    return import_path[2:] if import_path.startswith("./") else import_path


class ImportResolver:
    """Resolves ``import ./name.chatito`` against the workspace document titles."""

    def __init__(self, documents: Iterable[Document] | Callable[[], Sequence[Document]]) -> None:
        if callable(documents):
            self._documents_provider = documents
        else:
            snapshot = list(documents)
            self._documents_provider = lambda: snapshot

    def resolve(self, requesting_title: str, import_path: str) -> ResolvedImport:
        name = normalize_import_path(import_path)
        for document in self._documents_provider():
            if document.title.strip() == name:
                LOGGER.debug("ImportResolver: %s imports %s", requesting_title, document.title)
                return ResolvedImport(resolved_path="", text=document.text)
        raise ImportNotFound(import_path)

    def __call__(self, from_path: str, import_path: str) -> ResolvedImport:
        return self.resolve(from_path, import_path)
