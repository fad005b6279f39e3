"""Top-level workspace orchestration.

The controller owns the document store, the validation state, the adapter
selection and the export drawer, and wires user actions to them. It is the
only component that mutates shared state, always in response to a discrete
user or timer event.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Mapping

from ..compiler.adapters import AdapterRegistry
from ..compiler.config import JSONValue
from ..compiler.pipeline import CompilationPipeline, CompilationResult
from ..compiler.validator import Parser, ValidationOutcome, Validator
from ..documents.defaults import default_documents
from ..documents.model import DOCUMENT_SUFFIX
from ..documents.store import DocumentStore
from ..errors import CompileError, UnknownAdapterError, WorkspaceError
from ..events import (
    AdapterSelectionChanged,
    CompileFailed,
    DatasetExported,
    EventBus,
    ExportViewChanged,
    NoticePosted,
)
from ..services.persistence import WorkspacePersistence
from .capabilities import (
    DialogProvider,
    DownloadSink,
    EditorSurface,
    ExportArtifact,
    HeadlessDialogs,
    Scheduler,
)
from .selection import AdapterSelection
from .validation import DEFAULT_DEBOUNCE_SECONDS, DebouncedValidationController

__all__ = ["WorkspaceController", "EXPORT_BLOCKED_NOTICE", "NEW_FILE_PROMPT"]

LOGGER = logging.getLogger(__name__)

EXPORT_BLOCKED_NOTICE = "Please fix the errors found in the code."
NEW_FILE_PROMPT = "Please enter the new .chatito file name:"
_NEW_FILE_DEFAULT = "newFile"
DEFAULT_STAGGER_SECONDS = 0.1


class WorkspaceController:
    """Orchestrates documents, validation, adapter settings and export.

    Events Emitted:
        - ExportViewChanged: When the export drawer opens or closes
        - NoticePosted: For blocking notices (also shown via ``dialogs.alert``)
        - CompileFailed: When export aborts on a document
        - DatasetExported: After both artifacts reached the sink
        - AdapterSelectionChanged: After any format/option change
    """

    def __init__(
        self,
        parser: Parser,
        registry: AdapterRegistry,
        *,
        persistence: WorkspacePersistence | None = None,
        dialogs: DialogProvider | None = None,
        sink: DownloadSink | None = None,
        scheduler: Scheduler | None = None,
        event_bus: EventBus | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        stagger_seconds: float = DEFAULT_STAGGER_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._bus = event_bus or EventBus()
        self._persistence = persistence or WorkspacePersistence()
        self._dialogs: DialogProvider = dialogs or HeadlessDialogs()
        self._sink = sink
        self._stagger_seconds = stagger_seconds
        self._clock = clock
        self._pipeline = CompilationPipeline(registry)
        self._validator = Validator(parser)
        self._editor: EditorSurface | None = None
        self._applying_editor_text = False
        self._export_view_visible = False
        self._preview: JSONValue = None

        snapshot = self._persistence.load()
        self._store = DocumentStore(
            snapshot.documents or default_documents(),
            self._bus,
            persistence=self._persistence,
        )
        self._selection = AdapterSelection(
            format=snapshot.adapter_format,
            use_custom_options=snapshot.use_custom_options,
            custom_options=snapshot.custom_options,
            default_distribution=snapshot.default_distribution,
            auto_aliases=snapshot.auto_aliases,
        )
        self._validation = DebouncedValidationController(
            self._store,
            self._validator,
            scheduler=scheduler,
            delay=debounce_seconds,
            event_bus=self._bus,
            on_validated=self._on_validated,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def selection(self) -> AdapterSelection:
        return self._selection

    @property
    def validation(self) -> DebouncedValidationController:
        return self._validation

    @property
    def validation_state(self) -> ValidationOutcome:
        return self._validation.state

    @property
    def validator(self) -> Validator:
        return self._validator

    @property
    def active_index(self) -> int:
        return self._store.active_index

    @property
    def export_view_visible(self) -> bool:
        return self._export_view_visible

    @property
    def preview_dataset(self) -> JSONValue:
        return self._preview

    @property
    def can_open_export(self) -> bool:
        """The "Generate dataset" action is disabled while an error is shown."""
        return not self._validation.state.is_blocking

    @property
    def pipeline(self) -> CompilationPipeline:
        return self._pipeline

    # ------------------------------------------------------------------
    # Editor wiring
    # ------------------------------------------------------------------

    def attach_editor(self, editor: EditorSurface) -> None:
        """Bind an editor surface and show the active document in it."""
        self._editor = editor
        editor.add_text_listener(self.on_text_changed)
        self._show_active_document()

    def on_text_changed(self, text: str) -> None:
        """Handle an edit of the active document coming from the editor surface."""
        if self._applying_editor_text:
            return
        self._store.update(self._store.active_index, text)
        self._preview = None
        self._validation.notify_text_changed()

    # ------------------------------------------------------------------
    # Document actions
    # ------------------------------------------------------------------

    def select_document(self, index: int) -> None:
        self._store.set_active(index)
        self._show_active_document()
        self._validation.notify_text_changed()

    def add_document(self, name: str | None = None) -> int | None:
        """Prompt for a file name (unless given), append ``<name>.chatito`` and select it."""
        if name is None:
            name = self._dialogs.prompt_text(NEW_FILE_PROMPT, _NEW_FILE_DEFAULT)
        if not name:
            LOGGER.debug("WorkspaceController.add_document: cancelled")
            return None
        index = self._store.add(f"{name}{DOCUMENT_SUFFIX}", "")
        self.select_document(index)
        return index

    def remove_document(self, index: int) -> bool:
        """Remove a document, asking first when it has content. Returns True if removed."""
        document = self._store.get(index)
        if document.text and not self._dialogs.confirm(
            f"Do you really want to remove '{document.title}'?"
        ):
            return False
        self._store.remove(index)
        self._show_active_document()
        self._validation.notify_text_changed()
        return True

    # ------------------------------------------------------------------
    # Adapter selection
    # ------------------------------------------------------------------

    def set_format(self, adapter_format: str) -> None:
        self._selection.set_format(adapter_format)
        self._settings_changed(save_current_adapter=True)

    def set_use_custom_options(self, enabled: bool) -> None:
        self._selection.set_use_custom_options(enabled)
        self._settings_changed(save_current_adapter=True)

    def edit_custom_options(self, options: Mapping[str, Any]) -> None:
        """Replace the custom options with the edited tree (persists the options group only)."""
        self._selection.set_custom_options(options)
        self._persist_adapter_options()

    def set_default_distribution(self, distribution: str) -> None:
        self._selection.set_default_distribution(distribution)
        self._settings_changed(save_current_adapter=True)

    def set_auto_aliases(self, policy: str) -> None:
        self._selection.set_auto_aliases(policy)
        self._settings_changed(save_current_adapter=True)

    def persist_settings(self) -> None:
        self._persist_adapter_options()
        self._persistence.save_current_adapter(self._selection.format)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def request_export_view(self) -> bool:
        """Validate every non-empty document; open the export drawer only if none has errors."""
        if self._export_view_visible:
            return True
        for index, document in enumerate(self._store.list()):
            if not document.text:
                continue
            outcome = self._validator.validate(document.text)
            if outcome.is_blocking:
                LOGGER.info("Export blocked by %s: %s", document.title, outcome.message)
                self.select_document(index)
                self._validation.cancel()
                self._validation.set_state(outcome)
                self._post_notice(EXPORT_BLOCKED_NOTICE)
                return False
        self._set_export_view(True)
        return True

    def close_export_view(self) -> None:
        self._preview = None
        self._set_export_view(False)

    async def export(self) -> CompilationResult | None:
        """Compile every document and hand the two datasets to the download sink.

        Returns ``None`` after posting a notice when compilation fails or the
        sink cannot save an artifact.
        """
        selection = self._selection
        try:
            result = await self._pipeline.compile(
                self._store.list(),
                selection.format,
                initial_dataset=selection.effective_options(),
                config=selection.compile_config(),
            )
        except UnknownAdapterError as exc:
            self._post_notice(str(exc))
            return None
        except CompileError as exc:
            self._handle_compile_error(exc)
            return None

        training_name = f"training_dataset_{self._timestamp()}.json"
        if not await self._deliver(ExportArtifact(training_name, result.primary_json().encode("utf-8"))):
            return None
        if self._stagger_seconds > 0:
            await asyncio.sleep(self._stagger_seconds)
        testing_name = f"testing_dataset_{self._timestamp()}.json"
        if not await self._deliver(ExportArtifact(testing_name, result.secondary_json().encode("utf-8"))):
            return None

        self._preview = result.primary
        self._bus.publish(DatasetExported(training_name=training_name, testing_name=testing_name))
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _handle_compile_error(self, exc: CompileError) -> None:
        self._preview = None
        self._set_export_view(False)
        self.select_document(exc.document_index)
        self._validation.cancel()
        self._validation.set_state(ValidationOutcome.error(exc.message))
        self._bus.publish(CompileFailed(document_index=exc.document_index, message=exc.message))
        self._post_notice(f"Please fix error: {exc.message}")

    async def _deliver(self, artifact: ExportArtifact) -> bool:
        if self._sink is None:
            LOGGER.warning("No download sink configured; dropping %s", artifact.filename)
            return True
        try:
            outcome = self._sink.save(artifact)
            if inspect.isawaitable(outcome):
                await outcome
        except (OSError, WorkspaceError) as exc:
            LOGGER.warning("Saving %s failed: %s", artifact.filename, exc)
            self._preview = None
            self._post_notice(f"Unable to save {artifact.filename}: {exc}")
            return False
        return True

    def _timestamp(self) -> int:
        return int(round(self._clock()))

    def _on_validated(self, outcome: ValidationOutcome) -> None:
        self._persistence.save_documents(self._store.list())
        self.persist_settings()

    def _settings_changed(self, *, save_current_adapter: bool) -> None:
        self._preview = None
        self._persist_adapter_options()
        if save_current_adapter:
            self._persistence.save_current_adapter(self._selection.format)
        selection = self._selection
        self._bus.publish(
            AdapterSelectionChanged(
                format=selection.format,
                use_custom_options=selection.use_custom_options,
                default_distribution=selection.default_distribution,
                auto_aliases=selection.auto_aliases,
            )
        )

    def _persist_adapter_options(self) -> None:
        selection = self._selection
        self._persistence.save_adapter_options(
            use_custom_options=selection.use_custom_options,
            custom_options=selection.custom_options,
            default_distribution=selection.default_distribution,
            auto_aliases=selection.auto_aliases,
        )

    def _set_export_view(self, visible: bool) -> None:
        if self._export_view_visible == visible:
            return
        self._export_view_visible = visible
        self._bus.publish(ExportViewChanged(visible=visible))

    def _post_notice(self, message: str) -> None:
        self._bus.publish(NoticePosted(message=message))
        self._dialogs.alert(message)

    def _show_active_document(self) -> None:
        if self._editor is None:
            return
        self._applying_editor_text = True
        try:
            self._editor.set_text(self._store.active_document.text)
            self._editor.set_line_numbers()
        finally:
            self._applying_editor_text = False
