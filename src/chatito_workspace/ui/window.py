"""Main window wiring the workspace controller to Qt widgets."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDockWidget,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QTabBar,
    QVBoxLayout,
    QWidget,
)

from ..compiler.config import ADAPTER_FORMATS, VALID_AUTO_ALIASES, VALID_DISTRIBUTIONS
from ..events import (
    ActiveDocumentChanged,
    AdapterSelectionChanged,
    DatasetExported,
    DocumentAdded,
    DocumentRemoved,
    ExportViewChanged,
    ValidationStateChanged,
)
from ..workspace.controller import WorkspaceController
from .qt_surface import QtEditorSurface

__all__ = ["WorkspaceWindow"]

LOGGER = logging.getLogger(__name__)

_FORMAT_LABELS = {"default": "Default", "rasa": "Rasa NLU", "snips": "Snips NLU", "luis": "LUIS"}
_STATUS_COLORS = {"clean": "#1a6849", "warning": "#a66a00", "error": "#a32020"}


class WorkspaceWindow(QMainWindow):
    """Tab strip + editor + status line, with a dock for dataset generation."""

    def __init__(self, controller: WorkspaceController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._syncing = False
        self._pending_export: asyncio.Future[Any] | None = None
        self.setWindowTitle("Chatito workspace")

        self._tabs = QTabBar(self)
        self._tabs.setTabsClosable(True)
        self._tabs.setExpanding(False)
        self._tabs.currentChanged.connect(self._on_tab_selected)  # type: ignore[attr-defined]
        self._tabs.tabCloseRequested.connect(self._on_tab_close_requested)  # type: ignore[attr-defined]

        new_button = QPushButton("New file", self)
        new_button.clicked.connect(lambda: controller.add_document())  # type: ignore[attr-defined]
        self._generate_button = QPushButton("Generate Dataset", self)
        self._generate_button.clicked.connect(self._on_generate_clicked)  # type: ignore[attr-defined]

        header = QHBoxLayout()
        header.addWidget(self._tabs, 1)
        header.addWidget(new_button)
        header.addWidget(self._generate_button)

        self._editor = QtEditorSurface(self)
        self._status = QLabel(self)
        self._status.setObjectName("validationStatus")

        body = QVBoxLayout()
        body.addLayout(header)
        body.addWidget(self._editor, 1)
        body.addWidget(self._status)
        central = QWidget(self)
        central.setLayout(body)
        self.setCentralWidget(central)

        # Populating the combos fires their change signals; keep them off the controller.
        self._syncing = True
        try:
            self._dock = self._build_export_dock()
        finally:
            self._syncing = False
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self._dock)
        self._dock.hide()

        bus = controller.event_bus
        bus.subscribe(DocumentAdded, self._on_documents_changed)
        bus.subscribe(DocumentRemoved, self._on_documents_changed)
        bus.subscribe(ActiveDocumentChanged, self._on_documents_changed)
        bus.subscribe(ValidationStateChanged, self._on_validation_changed)
        bus.subscribe(ExportViewChanged, self._on_export_view_changed)
        bus.subscribe(AdapterSelectionChanged, self._on_selection_changed)
        bus.subscribe(DatasetExported, self._on_dataset_exported)

        controller.attach_editor(self._editor)
        self._rebuild_tabs()
        self._sync_selection_widgets()
        self._render_status()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def _build_export_dock(self) -> QDockWidget:
        dock = QDockWidget("Dataset generation settings", self)
        panel = QWidget(dock)
        form = QFormLayout()

        self._format_combo = QComboBox(panel)
        for name in ADAPTER_FORMATS:
            self._format_combo.addItem(_FORMAT_LABELS.get(name, name), name)
        self._format_combo.currentIndexChanged.connect(self._on_format_changed)  # type: ignore[attr-defined]
        form.addRow("Dataset format:", self._format_combo)

        self._distribution_combo = QComboBox(panel)
        for name in VALID_DISTRIBUTIONS:
            self._distribution_combo.addItem(name.title(), name)
        self._distribution_combo.currentIndexChanged.connect(self._on_distribution_changed)  # type: ignore[attr-defined]
        form.addRow("Default distribution:", self._distribution_combo)

        self._aliases_combo = QComboBox(panel)
        for name in VALID_AUTO_ALIASES:
            self._aliases_combo.addItem(name.title(), name)
        self._aliases_combo.currentIndexChanged.connect(self._on_aliases_changed)  # type: ignore[attr-defined]
        form.addRow("Auto aliases:", self._aliases_combo)

        self._custom_checkbox = QCheckBox("Use custom options", panel)
        self._custom_checkbox.toggled.connect(self._on_custom_toggled)  # type: ignore[attr-defined]
        form.addRow(self._custom_checkbox)

        self._options_editor = QPlainTextEdit(panel)
        self._options_editor.setPlaceholderText("{}")
        self._options_editor.textChanged.connect(self._on_options_edited)  # type: ignore[attr-defined]
        form.addRow("Custom initial options:", self._options_editor)

        download = QPushButton("Generate and download dataset!", panel)
        download.clicked.connect(self._on_download_clicked)  # type: ignore[attr-defined]
        form.addRow(download)

        self._preview = QPlainTextEdit(panel)
        self._preview.setReadOnly(True)
        form.addRow("Generated training dataset:", self._preview)

        panel.setLayout(form)
        dock.setWidget(panel)
        dock.visibilityChanged.connect(self._on_dock_visibility)  # type: ignore[attr-defined]
        return dock

    # ------------------------------------------------------------------
    # Qt signal handlers
    # ------------------------------------------------------------------

    def _on_tab_selected(self, index: int) -> None:
        if self._syncing or index < 0:
            return
        self._controller.select_document(index)

    def _on_tab_close_requested(self, index: int) -> None:
        self._controller.remove_document(index)

    def _on_generate_clicked(self) -> None:
        self._controller.request_export_view()

    def _on_download_clicked(self) -> None:
        if self._pending_export is not None and not self._pending_export.done():
            return
        self._pending_export = asyncio.ensure_future(self._controller.export())
        self._pending_export.add_done_callback(_log_export_failure)

    def _on_dock_visibility(self, visible: bool) -> None:
        if not visible and self._controller.export_view_visible:
            self._controller.close_export_view()

    def _on_format_changed(self, _index: int) -> None:
        if not self._syncing:
            self._controller.set_format(self._format_combo.currentData())

    def _on_distribution_changed(self, _index: int) -> None:
        if not self._syncing:
            self._controller.set_default_distribution(self._distribution_combo.currentData())

    def _on_aliases_changed(self, _index: int) -> None:
        if not self._syncing:
            self._controller.set_auto_aliases(self._aliases_combo.currentData())

    def _on_custom_toggled(self, checked: bool) -> None:
        if not self._syncing:
            self._controller.set_use_custom_options(checked)

    def _on_options_edited(self) -> None:
        if self._syncing:
            return
        try:
            options = json.loads(self._options_editor.toPlainText() or "{}")
        except json.JSONDecodeError:
            return
        if isinstance(options, dict):
            self._controller.edit_custom_options(options)

    # ------------------------------------------------------------------
    # Workspace event handlers
    # ------------------------------------------------------------------

    def _on_documents_changed(self, event: Any) -> None:
        self._rebuild_tabs()

    def _on_validation_changed(self, event: ValidationStateChanged) -> None:
        self._render_status()

    def _on_export_view_changed(self, event: ExportViewChanged) -> None:
        self._dock.setVisible(event.visible)
        if not event.visible:
            self._preview.clear()

    def _on_selection_changed(self, event: AdapterSelectionChanged) -> None:
        self._sync_selection_widgets()
        self._preview.clear()

    def _on_dataset_exported(self, event: DatasetExported) -> None:
        self._preview.setPlainText(json.dumps(self._controller.preview_dataset, indent=2))
        self.statusBar().showMessage(f"Saved {event.training_name} and {event.testing_name}", 5000)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _rebuild_tabs(self) -> None:
        titles = [document.title for document in self._controller.store.list()]
        self._syncing = True
        try:
            if titles != [self._tabs.tabText(i) for i in range(self._tabs.count())]:
                while self._tabs.count():
                    self._tabs.removeTab(0)
                for title in titles:
                    self._tabs.addTab(title)
            self._tabs.setCurrentIndex(self._controller.active_index)
        finally:
            self._syncing = False

    def _render_status(self) -> None:
        state = self._controller.validation_state
        self._status.setText(state.status_line)
        color = _STATUS_COLORS.get(state.kind.value, "#333")
        self._status.setStyleSheet(f"color: white; background-color: {color}; padding: 4px;")
        self._generate_button.setEnabled(self._controller.can_open_export)

    def _sync_selection_widgets(self) -> None:
        selection = self._controller.selection
        self._syncing = True
        try:
            self._format_combo.setCurrentIndex(max(0, self._format_combo.findData(selection.format)))
            self._distribution_combo.setCurrentIndex(
                max(0, self._distribution_combo.findData(selection.default_distribution))
            )
            self._aliases_combo.setCurrentIndex(max(0, self._aliases_combo.findData(selection.auto_aliases)))
            self._custom_checkbox.setChecked(selection.use_custom_options)
            self._options_editor.setEnabled(selection.use_custom_options)
            self._options_editor.setPlainText(json.dumps(selection.custom_options or {}, indent=2))
        finally:
            self._syncing = False


def _log_export_failure(future: asyncio.Future[Any]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Dataset export failed", exc_info=exc)
