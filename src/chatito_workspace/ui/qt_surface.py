"""PySide6 implementations of the editor surface and dialog capabilities."""

from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtGui import QFontDatabase
from PySide6.QtWidgets import QInputDialog, QMessageBox, QPlainTextEdit, QWidget

__all__ = ["QtEditorSurface", "QtDialogs"]

LOGGER = logging.getLogger(__name__)


class QtEditorSurface(QPlainTextEdit):
    """``QPlainTextEdit`` exposing the workspace editor-surface interface."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._listeners: list[Callable[[str], None]] = []
        self.setFont(QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        self.setTabStopDistance(4 * self.fontMetrics().horizontalAdvance(" "))
        self.textChanged.connect(self._emit_text_changed)  # type: ignore[attr-defined]

    def set_text(self, text: str) -> None:
        if self.toPlainText() != text:
            self.setPlainText(text)

    def set_line_numbers(self) -> None:
        # QPlainTextEdit tracks block numbers itself; refresh the viewport so
        # the gutter repaints against the newly loaded document.
        self.viewport().update()

    def add_text_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def _emit_text_changed(self) -> None:
        text = self.toPlainText()
        for listener in list(self._listeners):
            listener(text)


class QtDialogs:
    """Dialog provider backed by ``QInputDialog`` and ``QMessageBox``."""

    def __init__(self, parent_provider: Callable[[], Any] | None = None) -> None:
        self._parent_provider = parent_provider or (lambda: None)

    def prompt_text(self, message: str, default: str) -> str | None:
        text, accepted = QInputDialog.getText(self._parent_provider(), "New file", message, text=default)
        if not accepted:
            return None
        return text.strip() or None

    def confirm(self, message: str) -> bool:
        answer = QMessageBox.question(
            self._parent_provider(),
            "Confirm",
            message,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def alert(self, message: str) -> None:
        LOGGER.info("Alert: %s", message)
        QMessageBox.warning(self._parent_provider(), "Chatito workspace", message)
