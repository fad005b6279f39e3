"""Exception hierarchy shared by the workspace, compiler and persistence layers."""

from __future__ import annotations

__all__ = [
    "WorkspaceError",
    "ImportNotFound",
    "AdapterFailure",
    "CompileError",
    "PersistenceUnavailable",
    "UnknownAdapterError",
]


class WorkspaceError(Exception):
    """Base class for every error raised by :mod:`chatito_workspace`."""


class ImportNotFound(WorkspaceError):
    """Raised when an ``import`` statement names a document that does not exist."""

    def __init__(self, import_path: str) -> None:
        super().__init__(f"Can't import {import_path}. Not found.")
        self.import_path = import_path


class AdapterFailure(WorkspaceError):
    """Raised when an output adapter fails or returns an unusable result."""


class CompileError(WorkspaceError):
    """Raised by the compilation pipeline; carries the offending document index."""

    def __init__(self, document_index: int, message: str) -> None:
        super().__init__(message)
        self.document_index = document_index
        self.message = message

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"CompileError(document_index={self.document_index!r}, message={self.message!r})"


class PersistenceUnavailable(WorkspaceError):
    """Raised by key-value stores that are missing, unreadable or unwritable."""


class UnknownAdapterError(WorkspaceError, KeyError):
    """Raised when a dataset format has no registered adapter."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No adapter registered for format '{self.name}'"
