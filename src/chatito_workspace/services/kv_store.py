"""String-keyed key-value stores backing workspace persistence.

The store is advisory: callers treat every method as fallible. Concrete
stores raise :class:`PersistenceUnavailable` on IO or decoding problems so the
persistence layer can log and move on.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

from ..errors import PersistenceUnavailable
from ..utils.file_io import write_text

__all__ = [
    "KeyValueStore",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "NullKeyValueStore",
]

LOGGER = logging.getLogger(__name__)
_STORE_VERSION = 1


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string key-value interface (``localStorage`` shaped)."""

    def get_item(self, key: str) -> str | None:
        """Return the stored string or ``None`` when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        ...


class MemoryKeyValueStore:
    """In-process store, handy for tests and ephemeral sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class NullKeyValueStore:
    """Store used when no durable backend is available: reads miss, writes vanish."""

    def get_item(self, key: str) -> str | None:
        return None

    def set_item(self, key: str, value: str) -> None:
        LOGGER.debug("NullKeyValueStore: dropping write for %s", key)


class JsonFileKeyValueStore:
    """Persistence adapter storing all keys in one JSON file.

    Each ``set_item`` rewrites the file atomically, so a crash between two
    writes leaves the earlier keys intact.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        value = self._read_payload().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            LOGGER.warning("Store %s has a non-string value for %s; ignoring it", self._path, key)
            return None
        return value

    def set_item(self, key: str, value: str) -> None:
        try:
            payload = self._read_payload()
        except PersistenceUnavailable as exc:
            LOGGER.warning("Discarding unreadable store before write: %s", exc)
            payload = {}
        payload[key] = value
        payload["__version__"] = _STORE_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        try:
            write_text(self._path, body)
        except OSError as exc:
            raise PersistenceUnavailable(f"Unable to write {self._path}: {exc}") from exc

    def _read_payload(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            raise PersistenceUnavailable(f"Store {self._path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise PersistenceUnavailable(f"Unable to read {self._path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise PersistenceUnavailable(f"Store {self._path} does not contain a JSON object")
        return dict(data)
