"""Document store domain manager.

Single source of truth for the ordered document list and the active
selection. Structural mutations (add/remove) persist the full document list;
text updates only publish an event and are persisted by the debounced
validation path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator

from ..events import (
    ActiveDocumentChanged,
    DocumentAdded,
    DocumentRemoved,
    DocumentUpdated,
    EventBus,
)
from .model import DEFAULT_DOCUMENT_TITLE, Document

if TYPE_CHECKING:  # pragma: no cover
    from ..services.persistence import WorkspacePersistence

LOGGER = logging.getLogger(__name__)


class DocumentStore:
    """Ordered collection of named documents with an active selection.

    Events Emitted:
        - DocumentAdded: After ``add``
        - DocumentRemoved: After ``remove``
        - DocumentUpdated: After ``update``
        - ActiveDocumentChanged: When the active document changes
    """

    def __init__(
        self,
        documents: Iterable[Document] | None = None,
        event_bus: EventBus | None = None,
        *,
        persistence: WorkspacePersistence | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            documents: Initial documents, in compilation order.
            event_bus: Bus used to publish change events.
            persistence: Optional persistence adapter; receives the full list
                after every structural mutation.
        """
        self._documents: list[Document] = list(documents or [])
        self._bus = event_bus or EventBus()
        self._persistence = persistence
        self._active_index = 0
        if not self._documents:
            self._documents.append(Document(title=DEFAULT_DOCUMENT_TITLE))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, title: str, text: str = "") -> int:
        """Append a document and return its index.

        Title uniqueness is the caller's obligation; duplicates are accepted
        but make import lookups resolve to the first match.
        """
        if self.find_by_title(title) is not None:
            LOGGER.warning("DocumentStore.add: duplicate title %r; imports will use the first match", title)
        self._documents.append(Document(title=title, text=text))
        index = len(self._documents) - 1
        LOGGER.debug("DocumentStore.add: index=%d title=%s", index, title)
        self._bus.publish(DocumentAdded(index=index, title=title))
        self._persist()
        return index

    def remove(self, index: int) -> Document:
        """Remove and return the document at ``index``.

        Removing the sole document re-inserts an empty ``newFile.chatito``.
        """
        self._check_index(index)
        active_before = self._active_index
        removed = self._documents.pop(index)

        replaced = False
        if not self._documents:
            self._documents.append(Document(title=DEFAULT_DOCUMENT_TITLE))
            self._active_index = 0
            replaced = True
        elif index == active_before:
            self._active_index = active_before - 1 if active_before > 0 else 0
        elif index < active_before:
            self._active_index = active_before - 1

        LOGGER.debug(
            "DocumentStore.remove: index=%d title=%s active=%d->%d",
            index,
            removed.title,
            active_before,
            self._active_index,
        )
        self._bus.publish(DocumentRemoved(index=index, title=removed.title, replaced_with_default=replaced))
        if index == active_before or replaced:
            self._notify_active()
        self._persist()
        return removed

    def update(self, index: int, text: str) -> None:
        """Replace the text of the document at ``index`` (not persisted here)."""
        self._check_index(index)
        document = self._documents[index]
        document.text = text
        self._bus.publish(DocumentUpdated(index=index, title=document.title, length=len(text)))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, index: int) -> Document:
        self._check_index(index)
        return self._documents[index]

    def list(self) -> list[Document]:
        """Return the documents in compilation order (a shallow copy)."""
        return list(self._documents)

    def find_by_title(self, title: str) -> Document | None:
        """Return the first document whose stripped title equals ``title``."""
        for document in self._documents:
            if document.title.strip() == title:
                return document
        return None

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(list(self._documents))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active_document(self) -> Document:
        return self._documents[self._active_index]

    def set_active(self, index: int) -> Document:
        """Select ``index`` and notify listeners when the selection moves."""
        self._check_index(index)
        if index != self._active_index:
            self._active_index = index
            self._notify_active()
        return self._documents[index]

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._documents):
            raise IndexError(f"document index {index} out of range (0..{len(self._documents) - 1})")

    def _notify_active(self) -> None:
        document = self._documents[self._active_index]
        self._bus.publish(ActiveDocumentChanged(index=self._active_index, title=document.title))

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save_documents(self._documents)


__all__ = ["DocumentStore"]
