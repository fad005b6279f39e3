"""Log file and console handlers for the workspace process."""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import only for typing
    from ..services.settings import AppSettings

__all__ = ["LOG_FILE_NAME", "setup_logging"]

LOG_FILE_NAME = "chatito_workspace.log"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 3
# Event-loop internals stay at WARNING even when the workspace logs DEBUG.
_LOOP_LOGGERS = ("asyncio", "qasync")


def setup_logging(settings: AppSettings, *, console: bool = True) -> Path:
    """Send root logging to ``<settings.log_dir>/chatito_workspace.log`` and stderr.

    ``settings.debug_logging`` picks DEBUG over INFO. Calling it again swaps
    out the handlers from the previous call. Returns the log file path.
    """

    level = logging.DEBUG if settings.debug_logging else logging.INFO
    log_dir = Path(settings.log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _LOOP_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return log_path
