"""Shared test helpers and stub classes.

Import from here instead of duplicating these fakes in individual test files.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable

from chatito_workspace.compiler.adapters import AdapterRegistry
from chatito_workspace.compiler.config import CompileConfig
from chatito_workspace.documents.model import Document
from chatito_workspace.services.kv_store import MemoryKeyValueStore
from chatito_workspace.services.persistence import WorkspacePersistence
from chatito_workspace.workspace.capabilities import ExportArtifact
from chatito_workspace.workspace.controller import WorkspaceController

_INTENT_RE = re.compile(r"^%\[(?P<key>[^\]]+)\](?P<args>\(.*\))?")


class FakeSyntaxError(Exception):
    """Parser error shaped like the ones the DSL parser raises."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(message)
        self.name = "SyntaxError"
        self.message = message
        self.location = {"start": {"line": line, "column": column}}


class FakeParser:
    """Tiny stand-in for the DSL parser.

    Lines containing ``!!`` are syntax errors; ``%[key]`` lines become intent
    definitions whose ``args`` are set only when ``(...)`` follows the key.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, source: str) -> list[dict[str, Any]]:
        self.calls.append(source)
        entities: list[dict[str, Any]] = []
        for number, line in enumerate(source.splitlines(), start=1):
            column = line.find("!!")
            if column >= 0:
                raise FakeSyntaxError('Expected "%[" but "!" found.', number, column + 1)
            match = _INTENT_RE.match(line.strip())
            if match:
                entities.append(
                    {
                        "type": "IntentDefinition",
                        "key": match.group("key"),
                        "args": {"training": "1"} if match.group("args") else None,
                    }
                )
        return entities


class FakeAdapter:
    """Adapter recording its calls; appends each document's intents to the dataset."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[dict[str, Any]] = []

    def __call__(
        self,
        source: str,
        dataset: Any,
        importer: Callable[[str, str], Any],
        base_path: str,
        *,
        config: CompileConfig,
    ) -> dict[str, Any]:
        self.calls.append(
            {"source": source, "dataset": copy.deepcopy(dataset), "base_path": base_path, "config": config}
        )
        if self.fail_on is not None and self.fail_on in source:
            raise ValueError(f"Invalid entity {self.fail_on}")
        training = copy.deepcopy(dataset) if isinstance(dataset, dict) else {}
        testing: dict[str, Any] = {}
        for line in source.splitlines():
            stripped = line.strip()
            if stripped.startswith("import "):
                resolved = importer(base_path, stripped[len("import ") :].strip())
                training.setdefault("imported", []).append(resolved.dsl)
                continue
            match = _INTENT_RE.match(stripped)
            if match:
                key = match.group("key")
                training.setdefault("intents", []).append(key)
                testing.setdefault("intents", {})[key] = {"distribution": config.default_distribution}
        return {"training": training, "testing": testing}


class AsyncFakeAdapter(FakeAdapter):
    """Same as :class:`FakeAdapter` but returns an awaitable."""

    async def __call__(self, *args: Any, **kwargs: Any) -> dict[str, Any]:  # type: ignore[override]
        return super().__call__(*args, **kwargs)


class RecordingDialogs:
    def __init__(self, *, prompt_answer: str | None = "newFile", confirm_answer: bool = True) -> None:
        self.prompt_answer = prompt_answer
        self.confirm_answer = confirm_answer
        self.prompts: list[tuple[str, str]] = []
        self.confirms: list[str] = []
        self.alerts: list[str] = []

    def prompt_text(self, message: str, default: str) -> str | None:
        self.prompts.append((message, default))
        return self.prompt_answer

    def confirm(self, message: str) -> bool:
        self.confirms.append(message)
        return self.confirm_answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)


class MemorySink:
    def __init__(self) -> None:
        self.artifacts: list[ExportArtifact] = []

    def save(self, artifact: ExportArtifact) -> None:
        self.artifacts.append(artifact)


class ManualTimer:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic ``call_later`` driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self.timers if not timer.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (timer for timer in self.timers if not timer.cancelled and timer.when <= self.now),
            key=lambda timer: timer.when,
        )
        self.timers = [timer for timer in self.timers if not timer.cancelled and timer.when > self.now]
        for timer in due:
            timer.callback(*timer.args)


class FakeEditor:
    """Editor surface recording what the controller shows."""

    def __init__(self) -> None:
        self.text = ""
        self.line_number_refreshes = 0
        self._listeners: list[Callable[[str], None]] = []

    def set_text(self, text: str) -> None:
        self.text = text
        for listener in list(self._listeners):
            listener(text)

    def set_line_numbers(self) -> None:
        self.line_number_refreshes += 1

    def add_text_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def type(self, text: str) -> None:
        """Simulate the user replacing the editor contents."""
        self.text = text
        for listener in list(self._listeners):
            listener(text)


def make_controller(
    documents: list[Document] | None = None,
    *,
    adapter: Any = None,
    kv: MemoryKeyValueStore | None = None,
    dialogs: RecordingDialogs | None = None,
    sink: Any = None,
    scheduler: ManualScheduler | None = None,
    stagger_seconds: float = 0.0,
    clock: Callable[[], float] = lambda: 1_700_000_000.4,
) -> WorkspaceController:
    """Controller over in-memory fakes; ``documents`` are pre-persisted when given."""

    store = kv if kv is not None else MemoryKeyValueStore()
    persistence = WorkspacePersistence(store)
    if documents is not None:
        persistence.save_documents(documents)
    registry = AdapterRegistry({"default": adapter or FakeAdapter(), "rasa": adapter or FakeAdapter()})
    return WorkspaceController(
        FakeParser(),
        registry,
        persistence=persistence,
        dialogs=dialogs or RecordingDialogs(),
        sink=sink if sink is not None else MemorySink(),
        scheduler=scheduler or ManualScheduler(),
        stagger_seconds=stagger_seconds,
        clock=clock,
    )


# Module-level instances so ``module:attr`` loading can find ready-made callables.
fake_parse = FakeParser()
fake_adapter = FakeAdapter()
