"""Application settings dataclass with environment and CLI overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "AppSettings",
    "load_app_settings",
    "parse_adapter_modules",
    "DEFAULT_LOG_DIR",
    "DEFAULT_STORE_PATH",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".chatito_workspace"
DEFAULT_STORE_PATH = _SETTINGS_DIR / "workspace.json"
DEFAULT_LOG_DIR = _SETTINGS_DIR / "logs"
_ENV_OVERRIDES: Mapping[str, str] = {
    "CHATITO_WORKSPACE_STORE_PATH": "store_path",
    "CHATITO_WORKSPACE_EXPORT_DIR": "export_dir",
    "CHATITO_WORKSPACE_PARSER": "parser_module",
    "CHATITO_WORKSPACE_LOG_DIR": "log_dir",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "CHATITO_WORKSPACE_DEBUG": "debug_logging",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "CHATITO_WORKSPACE_DEBOUNCE_MS": "debounce_ms",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "CHATITO_WORKSPACE_STAGGER_SECONDS": "download_stagger_seconds",
}
_LIST_ENV_OVERRIDES: Mapping[str, str] = {
    "CHATITO_WORKSPACE_ADAPTERS": "adapter_modules",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}


@dataclass(slots=True)
class AppSettings:
    """Runtime configuration for the workspace process.

    ``adapter_modules`` entries look like ``rasa=my_pkg.adapters:rasa_adapter``
    and ``parser_module`` like ``my_pkg.parser:parse``.
    """

    store_path: str = str(DEFAULT_STORE_PATH)
    export_dir: str = "."
    debounce_ms: int = 300
    download_stagger_seconds: float = 0.1
    debug_logging: bool = False
    log_dir: str = str(DEFAULT_LOG_DIR)
    parser_module: str | None = None
    adapter_modules: list[str] = field(default_factory=list)

    @property
    def debounce_seconds(self) -> float:
        return max(0, self.debounce_ms) / 1000.0


def load_app_settings(overrides: Mapping[str, Any] | None = None) -> AppSettings:
    """Return defaults patched by environment variables, then by ``overrides``."""

    settings = _apply_env_overrides(AppSettings())
    if overrides:
        settings = _apply_overrides(settings, overrides, source="CLI")
    return settings


def parse_adapter_modules(entries: list[str]) -> dict[str, str]:
    """Split ``name=module:attr`` entries into a mapping, skipping malformed ones."""

    result: dict[str, str] = {}
    for entry in entries:
        name, sep, target = entry.partition("=")
        name = name.strip()
        target = target.strip()
        if not sep or not name or ":" not in target:
            LOGGER.warning("Ignoring malformed adapter entry %r (expected name=module:attr)", entry)
            continue
        result[name] = target
    return result


def _apply_overrides(
    settings: AppSettings,
    overrides: Mapping[str, Any],
    *,
    source: str = "runtime",
) -> AppSettings:
    allowed = {item.name: item for item in fields(AppSettings)}
    filtered: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in allowed or value is None:
            continue
        filtered[key] = _coerce_value(key, value, getattr(settings, key))
    filtered = {key: value for key, value in filtered.items() if value is not None}
    if filtered:
        LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
        settings = replace(settings, **filtered)
    return settings


def _coerce_value(key: str, value: Any, current: Any) -> Any:
    if not isinstance(value, str):
        return value
    if isinstance(current, bool):
        return value.strip().lower() in _TRUE_VALUES
    if isinstance(current, int):
        try:
            return int(value, 10)
        except ValueError:
            LOGGER.warning("Override %s=%s is not a valid integer", key, value)
            return None
    if isinstance(current, float):
        try:
            return float(value)
        except ValueError:
            LOGGER.warning("Override %s=%s is not a valid float", key, value)
            return None
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _apply_env_overrides(settings: AppSettings) -> AppSettings:
    overrides: Dict[str, Any] = {}
    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None:
            overrides[field_name] = value
    for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None:
            overrides[field_name] = value.strip().lower() in _TRUE_VALUES
    for env_name, field_name in _INT_ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None:
            continue
        try:
            overrides[field_name] = int(value, 10)
        except ValueError:
            LOGGER.warning(
                "Environment override %s=%s is not a valid integer",
                env_name,
                value,
            )
    for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None:
            continue
        try:
            overrides[field_name] = float(value)
        except ValueError:
            LOGGER.warning(
                "Environment override %s=%s is not a valid float", env_name, value
            )
    for env_name, field_name in _LIST_ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None:
            overrides[field_name] = [item.strip() for item in value.split(",") if item.strip()]
    if overrides:
        settings = _apply_overrides(settings, overrides, source="environment")
    return settings
