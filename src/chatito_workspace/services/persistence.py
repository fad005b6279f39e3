"""Workspace persistence adapter.

Reads and writes the workspace snapshot as five independent key-value
entries. Every read and write is isolated: a failure on one key is logged and
never prevents the others from loading or saving.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..compiler.config import (
    ADAPTER_FORMATS,
    DEFAULT_ADAPTER_FORMAT,
    DEFAULT_AUTO_ALIASES,
    DEFAULT_DISTRIBUTION,
    VALID_AUTO_ALIASES,
    VALID_DISTRIBUTIONS,
)
from ..documents.model import Document
from ..errors import PersistenceUnavailable
from .kv_store import KeyValueStore, NullKeyValueStore

__all__ = [
    "TABS_KEY",
    "ADAPTER_OPTIONS_KEY",
    "CURRENT_ADAPTER_KEY",
    "DEFAULT_DISTRIBUTION_KEY",
    "AUTO_ALIASES_KEY",
    "WorkspaceSnapshot",
    "WorkspacePersistence",
]

LOGGER = logging.getLogger(__name__)

TABS_KEY = "___tabs"
ADAPTER_OPTIONS_KEY = "___adapterOptions"
CURRENT_ADAPTER_KEY = "___currentAdapter"
DEFAULT_DISTRIBUTION_KEY = "___defaultDistribution"
AUTO_ALIASES_KEY = "___autoAliases"


@dataclass(slots=True)
class WorkspaceSnapshot:
    """Values restored from the store; ``None`` means "use the built-in default"."""

    documents: list[Document] | None = None
    custom_options: dict[str, Any] | None = None
    adapter_format: str = DEFAULT_ADAPTER_FORMAT
    default_distribution: str = DEFAULT_DISTRIBUTION
    auto_aliases: str = DEFAULT_AUTO_ALIASES
    use_custom_options: bool = False
    failed_keys: list[str] = field(default_factory=list)


class WorkspacePersistence:
    """Persistence adapter between the workspace and a :class:`KeyValueStore`."""

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store: KeyValueStore = store if store is not None else NullKeyValueStore()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_documents(self, documents: Iterable[Document]) -> bool:
        """Persist the full document list as ``[{title, value}, ...]``."""
        payload = [document.to_payload() for document in documents]
        return self._write(TABS_KEY, json.dumps(payload))

    def save_adapter_options(
        self,
        *,
        use_custom_options: bool,
        custom_options: Mapping[str, Any] | None,
        default_distribution: str,
        auto_aliases: str,
    ) -> bool:
        """Persist the options group: custom options, distribution and aliases policy."""
        options_value = json.dumps(custom_options or {}) if use_custom_options else ""
        results = [
            self._write(ADAPTER_OPTIONS_KEY, options_value),
            self._write(DEFAULT_DISTRIBUTION_KEY, default_distribution),
            self._write(AUTO_ALIASES_KEY, auto_aliases),
        ]
        return all(results)

    def save_current_adapter(self, adapter_format: str) -> bool:
        return self._write(CURRENT_ADAPTER_KEY, adapter_format)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self) -> WorkspaceSnapshot:
        """Load every key independently, defaulting the ones that are missing or malformed."""
        snapshot = WorkspaceSnapshot()

        raw_tabs = self._read_json(TABS_KEY, snapshot)
        if raw_tabs is not None:
            snapshot.documents = self._coerce_documents(raw_tabs, snapshot)

        raw_options = self._read_json(ADAPTER_OPTIONS_KEY, snapshot)
        if isinstance(raw_options, Mapping):
            snapshot.custom_options = dict(raw_options)
            snapshot.use_custom_options = True
        elif raw_options is not None:
            LOGGER.warning("Ignoring non-object adapter options of type %s", type(raw_options).__name__)
            snapshot.failed_keys.append(ADAPTER_OPTIONS_KEY)

        snapshot.adapter_format = self._read_choice(
            CURRENT_ADAPTER_KEY, ADAPTER_FORMATS, DEFAULT_ADAPTER_FORMAT, snapshot
        )
        snapshot.default_distribution = self._read_choice(
            DEFAULT_DISTRIBUTION_KEY, VALID_DISTRIBUTIONS, DEFAULT_DISTRIBUTION, snapshot
        )
        snapshot.auto_aliases = self._read_choice(
            AUTO_ALIASES_KEY, VALID_AUTO_ALIASES, DEFAULT_AUTO_ALIASES, snapshot
        )

        LOGGER.debug(
            "Workspace loaded: documents=%s format=%s distribution=%s aliases=%s custom_options=%s failed=%s",
            None if snapshot.documents is None else len(snapshot.documents),
            snapshot.adapter_format,
            snapshot.default_distribution,
            snapshot.auto_aliases,
            snapshot.use_custom_options,
            snapshot.failed_keys,
        )
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _write(self, key: str, value: str) -> bool:
        try:
            self._store.set_item(key, value)
        except PersistenceUnavailable as exc:
            LOGGER.warning("WorkspacePersistence: failed to write %s: %s", key, exc)
            return False
        except Exception as exc:
            LOGGER.warning("WorkspacePersistence: store raised while writing %s: %s", key, exc)
            return False
        return True

    def _read(self, key: str, snapshot: WorkspaceSnapshot) -> str | None:
        try:
            return self._store.get_item(key)
        except Exception as exc:
            LOGGER.warning("WorkspacePersistence: failed to read %s: %s", key, exc)
            snapshot.failed_keys.append(key)
            return None

    def _read_json(self, key: str, snapshot: WorkspaceSnapshot) -> Any:
        raw = self._read(key, snapshot)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("WorkspacePersistence: %s is not valid JSON: %s", key, exc)
            snapshot.failed_keys.append(key)
            return None

    def _read_choice(
        self,
        key: str,
        choices: tuple[str, ...],
        default: str,
        snapshot: WorkspaceSnapshot,
    ) -> str:
        raw = self._read(key, snapshot)
        if not raw:
            return default
        if raw not in choices:
            LOGGER.warning("WorkspacePersistence: ignoring unknown %s value %r", key, raw)
            snapshot.failed_keys.append(key)
            return default
        return raw

    @staticmethod
    def _coerce_documents(raw: Any, snapshot: WorkspaceSnapshot) -> list[Document] | None:
        if not isinstance(raw, list):
            LOGGER.warning("WorkspacePersistence: %s is not a list", TABS_KEY)
            snapshot.failed_keys.append(TABS_KEY)
            return None
        documents: list[Document] = []
        for entry in raw:
            if not isinstance(entry, Mapping):
                continue
            try:
                documents.append(Document.from_payload(entry))
            except ValueError as exc:
                LOGGER.warning("WorkspacePersistence: skipping malformed document entry: %s", exc)
        if not documents:
            snapshot.failed_keys.append(TABS_KEY)
            return None
        return documents
