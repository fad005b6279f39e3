"""Workspace orchestration: selection, debounced validation and export."""

from __future__ import annotations

from .capabilities import (
    DialogProvider,
    DirectoryDownloadSink,
    DownloadSink,
    EditorSurface,
    ExportArtifact,
    HeadlessDialogs,
)
from .controller import WorkspaceController
from .selection import AdapterSelection
from .validation import DebouncedValidationController, ValidationPhase

__all__ = [
    "AdapterSelection",
    "DebouncedValidationController",
    "DialogProvider",
    "DirectoryDownloadSink",
    "DownloadSink",
    "EditorSurface",
    "ExportArtifact",
    "HeadlessDialogs",
    "ValidationPhase",
    "WorkspaceController",
]
