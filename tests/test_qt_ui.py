"""Qt surface and window wiring, exercised offscreen."""

from __future__ import annotations

import asyncio
import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
qt_widgets = pytest.importorskip("PySide6.QtWidgets")

from chatito_workspace.documents.model import Document  # noqa: E402
from chatito_workspace.ui import qt_surface  # noqa: E402
from chatito_workspace.ui.qt_surface import QtDialogs, QtEditorSurface  # noqa: E402
from chatito_workspace.ui import window as window_module  # noqa: E402
from chatito_workspace.ui.window import WorkspaceWindow  # noqa: E402

from tests.helpers import ManualScheduler, make_controller  # noqa: E402

GOOD = "%[greet]('training': '2')\n    hi\n"
BROKEN = "%[oops]\n    !!\n"


@pytest.fixture(scope="module", autouse=True)
def _qapp() -> object:
    app = qt_widgets.QApplication.instance()
    if app is None:  # pragma: no cover - depends on PySide6 availability
        app = qt_widgets.QApplication([])
    return app


def test_editor_surface_notifies_listeners_on_change() -> None:
    editor = QtEditorSurface()
    received: list[str] = []
    editor.add_text_listener(received.append)

    editor.set_text("%[a]")
    editor.set_text("%[a]")

    assert received == ["%[a]"]
    assert editor.toPlainText() == "%[a]"


def test_dialogs_wrap_qt_prompts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(qt_surface.QInputDialog, "getText", lambda *args, **kwargs: ("  intents ", True))
    monkeypatch.setattr(
        qt_surface.QMessageBox,
        "question",
        lambda *args, **kwargs: qt_surface.QMessageBox.StandardButton.No,
    )
    alerts: list[str] = []
    monkeypatch.setattr(qt_surface.QMessageBox, "warning", lambda parent, title, message: alerts.append(message))

    dialogs = QtDialogs()

    assert dialogs.prompt_text("name?", "newFile") == "intents"
    assert dialogs.confirm("sure?") is False
    dialogs.alert("careful")
    assert alerts == ["careful"]


def test_cancelled_prompt_returns_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(qt_surface.QInputDialog, "getText", lambda *args, **kwargs: ("ignored", False))
    assert QtDialogs().prompt_text("name?", "newFile") is None


def test_window_tracks_documents_and_validation() -> None:
    scheduler = ManualScheduler()
    controller = make_controller(
        [Document("a.chatito", GOOD), Document("b.chatito", BROKEN)], scheduler=scheduler
    )
    window = WorkspaceWindow(controller)

    assert window._tabs.count() == 2
    assert window._editor.toPlainText() == GOOD
    assert window._status.text() == "Correct syntax!"

    window._tabs.setCurrentIndex(1)
    assert controller.active_index == 1
    assert window._editor.toPlainText() == BROKEN

    scheduler.advance(0.3)
    assert window._status.text().startswith("SyntaxError:")
    assert not window._generate_button.isEnabled()

    controller.add_document("more")
    assert window._tabs.count() == 3
    assert window._tabs.currentIndex() == 2


def test_window_shows_export_dock_when_gate_passes() -> None:
    controller = make_controller([Document("a.chatito", GOOD)])
    window = WorkspaceWindow(controller)

    window._on_generate_clicked()
    assert not window._dock.isHidden()

    controller.close_export_view()
    assert window._dock.isHidden()


def test_failed_export_task_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    loop = asyncio.new_event_loop()
    try:
        failed = loop.create_future()
        failed.set_exception(OSError("disk full"))
        done = loop.create_future()
        done.set_result(None)

        with caplog.at_level(logging.ERROR, logger=window_module.__name__):
            window_module._log_export_failure(failed)
            window_module._log_export_failure(done)
    finally:
        loop.close()

    assert [record.getMessage() for record in caplog.records] == ["Dataset export failed"]
    assert caplog.records[0].exc_info is not None
