"""Output adapter boundary and registry.

Adapters turn one parsed document plus the dataset accumulated so far into a
``{"training": ..., "testing": ...}`` pair. Their schemas are opaque here.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Awaitable, Callable, Iterator, Mapping, Protocol, Union

from ..errors import UnknownAdapterError
from .config import CompileConfig, JSONValue
from .imports import ResolvedImport

__all__ = [
    "Adapter",
    "AdapterResult",
    "ImportCallback",
    "AdapterRegistry",
    "load_callable",
]

LOGGER = logging.getLogger(__name__)

ImportCallback = Callable[[str, str], ResolvedImport]
AdapterResult = Mapping[str, JSONValue]


class Adapter(Protocol):
    """Dataset adapter; may return the result directly or as an awaitable."""

    def __call__(
        self,
        source: str,
        dataset: JSONValue,
        importer: ImportCallback,
        base_path: str,
        *,
        config: CompileConfig,
    ) -> Union[AdapterResult, Awaitable[AdapterResult]]:
        ...


def load_callable(target: str) -> Callable[..., Any]:
    """Import ``package.module:attribute`` and return the attribute."""

    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Expected 'module:attribute', got {target!r}")
    module = importlib.import_module(module_name)
    value: Any = module
    for part in attribute.split("."):
        value = getattr(value, part)
    if not callable(value):
        raise TypeError(f"{target} is not callable")
    return value


class AdapterRegistry:
    """Maps dataset format names (``default``, ``rasa``...) to adapters."""

    def __init__(self, adapters: Mapping[str, Adapter] | None = None) -> None:
        self._adapters: dict[str, Adapter] = dict(adapters or {})

    def register(self, name: str, adapter: Adapter) -> None:
        if name in self._adapters:
            LOGGER.debug("AdapterRegistry: replacing adapter %s", name)
        self._adapters[name] = adapter

    def get(self, name: str) -> Adapter:
        try:
            return self._adapters[name]
        except KeyError:
            raise UnknownAdapterError(name) from None

    def names(self) -> tuple[str, ...]:
        return tuple(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def __iter__(self) -> Iterator[str]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    @classmethod
    def from_targets(cls, targets: Mapping[str, str]) -> "AdapterRegistry":
        """Build a registry from ``{name: "module:attr"}``; unloadable entries are logged and skipped."""

        registry = cls()
        for name, target in targets.items():
            try:
                registry.register(name, load_callable(target))
            except (ImportError, AttributeError, TypeError, ValueError) as exc:
                LOGGER.warning("Unable to load adapter %s from %s: %s", name, target, exc)
        return registry
