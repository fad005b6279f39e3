"""Tests for the log handler setup."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Iterator

import pytest

from chatito_workspace.services.settings import AppSettings, load_app_settings
from chatito_workspace.utils.logging import LOG_FILE_NAME, setup_logging


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    loop_levels = {name: logging.getLogger(name).level for name in ("asyncio", "qasync")}
    yield
    # Only the handlers setup_logging creates; pytest's own handlers are subclasses.
    for handler in root.handlers[:]:
        if type(handler) in (logging.handlers.RotatingFileHandler, logging.StreamHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    for name, loop_level in loop_levels.items():
        logging.getLogger(name).setLevel(loop_level)
    logging.captureWarnings(False)


@pytest.mark.usefixtures("restore_root_logging")
class TestSetupLogging:
    def test_writes_to_log_dir(self, tmp_path: Path) -> None:
        path = setup_logging(AppSettings(log_dir=str(tmp_path / "logs")), console=False)

        logging.getLogger("chatito_workspace.test").info("hello log")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert path == tmp_path / "logs" / LOG_FILE_NAME
        assert "| INFO     | chatito_workspace.test | hello log" in path.read_text(encoding="utf-8")
        assert logging.getLogger().level == logging.INFO

    def test_debug_flag_lowers_level_but_not_loop_loggers(self, tmp_path: Path) -> None:
        setup_logging(AppSettings(log_dir=str(tmp_path), debug_logging=True))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("asyncio").level == logging.WARNING
        assert logging.getLogger("qasync").level == logging.WARNING
        assert any(
            isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)
            for handler in logging.getLogger().handlers
        )

    def test_second_call_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging(AppSettings(log_dir=str(tmp_path / "one")), console=False)
        second = setup_logging(AppSettings(log_dir=str(tmp_path / "two")), console=False)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert [Path(h.baseFilename) for h in file_handlers] == [second]


def test_log_dir_comes_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHATITO_WORKSPACE_LOG_DIR", str(tmp_path / "env-logs"))
    assert load_app_settings().log_dir == str(tmp_path / "env-logs")
