"""Service layer helpers (key-value stores, persistence, settings)."""

from .kv_store import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore, NullKeyValueStore
from .persistence import WorkspacePersistence, WorkspaceSnapshot
from .settings import AppSettings, load_app_settings

__all__ = [
    "AppSettings",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "NullKeyValueStore",
    "WorkspacePersistence",
    "WorkspaceSnapshot",
    "load_app_settings",
]
