"""Injected capabilities: dialogs, download sink and timer scheduling.

Each capability is a small protocol with a headless implementation so the
workspace core runs without a GUI, a browser or a durable store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from ..utils.file_io import write_bytes_atomic

__all__ = [
    "DialogProvider",
    "HeadlessDialogs",
    "ExportArtifact",
    "DownloadSink",
    "DirectoryDownloadSink",
    "EditorSurface",
    "TimerHandle",
    "Scheduler",
    "EXPORT_MIME_TYPE",
]

LOGGER = logging.getLogger(__name__)
EXPORT_MIME_TYPE = "text/json;charset=utf-8"


class DialogProvider(Protocol):
    """Protocol for user-facing prompts, confirmations and alerts."""

    def prompt_text(self, message: str, default: str) -> str | None:
        """Ask for a line of text; ``None`` means the user cancelled."""
        ...

    def confirm(self, message: str) -> bool:
        ...

    def alert(self, message: str) -> None:
        ...


class HeadlessDialogs:
    """Fallback dialogs: prompts accept the default, confirmations are denied."""

    def prompt_text(self, message: str, default: str) -> str | None:
        LOGGER.debug("HeadlessDialogs.prompt_text: %s -> %s", message, default)
        return default

    def confirm(self, message: str) -> bool:
        LOGGER.info("HeadlessDialogs.confirm denied: %s", message)
        return False

    def alert(self, message: str) -> None:
        LOGGER.warning("%s", message)


@dataclass(slots=True, frozen=True)
class ExportArtifact:
    """A named JSON blob handed to the download sink."""

    filename: str
    payload: bytes
    mime_type: str = EXPORT_MIME_TYPE


class DownloadSink(Protocol):
    def save(self, artifact: ExportArtifact) -> Any:
        ...


class DirectoryDownloadSink:
    """Writes artifacts into a directory (the headless stand-in for a browser download)."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, artifact: ExportArtifact) -> Path:
        target = self._directory / artifact.filename
        write_bytes_atomic(target, artifact.payload)
        LOGGER.info("Saved %s (%d bytes)", target, len(artifact.payload))
        return target


class EditorSurface(Protocol):
    """Text-input widget showing the active document."""

    def set_text(self, text: str) -> None:
        ...

    def set_line_numbers(self) -> None:
        ...

    def add_text_listener(self, listener: Callable[[str], None]) -> None:
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything with ``call_later`` (``asyncio`` event loops qualify as-is)."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...
