"""Dataclasses describing workspace documents and their persisted shape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

__all__ = ["Document", "DEFAULT_DOCUMENT_TITLE", "DOCUMENT_SUFFIX"]

DOCUMENT_SUFFIX = ".chatito"
DEFAULT_DOCUMENT_TITLE = f"newFile{DOCUMENT_SUFFIX}"


@dataclass(slots=True)
class Document:
    """A named DSL source document ("tab").

    ``title`` doubles as the key other documents use to import this one.
    """

    title: str
    text: str = ""

    def to_payload(self) -> dict[str, str]:
        """Return the persisted ``{title, value}`` representation."""

        return {"title": self.title, "value": self.text}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Document":
        """Build a document from a persisted entry, raising ``ValueError`` if malformed."""

        title = payload.get("title")
        value = payload.get("value", "")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("document entry is missing a title")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"document {title!r} has a non-string value")
        return cls(title=title, text=value)

    @property
    def is_empty(self) -> bool:
        return not self.text
