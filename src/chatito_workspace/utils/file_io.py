"""File IO helpers shared by the key-value store and the download sink."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["write_bytes_atomic", "write_text"]


def write_bytes_atomic(path: Path | str, payload: bytes) -> Path:
    """Write ``payload`` to ``path`` via a temp file + ``os.replace``."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    descriptor, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return target


def write_text(path: Path | str, content: str, *, encoding: str = "utf-8") -> Path:
    """Write text to disk using atomic semantics."""

    return write_bytes_atomic(path, content.encode(encoding))
