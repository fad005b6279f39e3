"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from chatito_workspace.documents.model import Document
from chatito_workspace.services.kv_store import MemoryKeyValueStore

from tests.helpers import FakeParser, ManualScheduler, MemorySink, RecordingDialogs


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def parser() -> FakeParser:
    return FakeParser()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def dialogs() -> RecordingDialogs:
    return RecordingDialogs()


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def two_documents() -> list[Document]:
    return [
        Document("a.chatito", "%[greet]('training': '2')\n    hi\n"),
        Document("b.chatito", "%[bye]('training': '2')\n    bye\n"),
    ]


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep log files and settings lookups out of the real home directory."""
    monkeypatch.setenv("CHATITO_WORKSPACE_LOG_DIR", str(tmp_path / "logs"))
    for name in (
        "CHATITO_WORKSPACE_STORE_PATH",
        "CHATITO_WORKSPACE_EXPORT_DIR",
        "CHATITO_WORKSPACE_DEBOUNCE_MS",
        "CHATITO_WORKSPACE_STAGGER_SECONDS",
        "CHATITO_WORKSPACE_DEBUG",
        "CHATITO_WORKSPACE_ADAPTERS",
        "CHATITO_WORKSPACE_PARSER",
    ):
        monkeypatch.delenv(name, raising=False)
