"""Ordered, fail-fast compilation of every workspace document.

Documents are compiled strictly left to right: each adapter call receives the
training dataset produced by the previous document, and every testing
dataset is deep-merged into one accumulated mapping.
"""

from __future__ import annotations

import copy
import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ..documents.model import Document
from ..errors import AdapterFailure, CompileError
from .adapters import Adapter, AdapterRegistry
from .config import CompileConfig, JSONObject, JSONValue
from .imports import ImportResolver
from .merge import merge_deep

__all__ = ["CompilationResult", "CompilationPipeline", "dump_dataset"]

LOGGER = logging.getLogger(__name__)


def dump_dataset(dataset: JSONValue) -> str:
    """Serialize a dataset compactly, the way it is written to export artifacts."""

    return json.dumps(dataset, ensure_ascii=False, separators=(",", ":"))


@dataclass(slots=True, frozen=True)
class CompilationResult:
    """The two datasets produced by a successful compile."""

    primary: JSONValue
    secondary: JSONObject

    def primary_json(self) -> str:
        return dump_dataset(self.primary)

    def secondary_json(self) -> str:
        return dump_dataset(self.secondary)


class CompilationPipeline:
    """Runs the selected adapter over every document in store order."""

    def __init__(self, registry: AdapterRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    async def compile(
        self,
        documents: Sequence[Document],
        adapter_id: str,
        *,
        initial_dataset: Mapping[str, Any] | None = None,
        config: CompileConfig | None = None,
    ) -> CompilationResult:
        """Compile ``documents`` with the adapter registered as ``adapter_id``.

        ``initial_dataset`` (a copy of it) is what the first adapter call
        receives in place of ``None``; later calls get the previous training set.

        Raises:
            UnknownAdapterError: If ``adapter_id`` is not registered.
            CompileError: On the first document whose adapter call fails;
                nothing computed so far is returned.
        """
        adapter = self._registry.get(adapter_id)
        config = config or CompileConfig()
        ordered = list(documents)
        resolver = ImportResolver(ordered)

        primary: JSONValue = copy.deepcopy(dict(initial_dataset)) if initial_dataset is not None else None
        secondary: JSONObject = {}
        LOGGER.debug(
            "CompilationPipeline.compile: adapter=%s documents=%d config=%s",
            adapter_id,
            len(ordered),
            config,
        )
        for index, document in enumerate(ordered):
            try:
                training, testing = await self._run_adapter(adapter, document, primary, resolver, config)
            except Exception as exc:
                message = str(exc) or type(exc).__name__
                LOGGER.warning(
                    "CompilationPipeline: document %d (%s) failed: %s",
                    index,
                    document.title,
                    message,
                )
                raise CompileError(index, message) from exc
            primary = training
            merge_deep(secondary, testing)

        return CompilationResult(primary=primary, secondary=secondary)

    @staticmethod
    async def _run_adapter(
        adapter: Adapter,
        document: Document,
        dataset: JSONValue,
        resolver: ImportResolver,
        config: CompileConfig,
    ) -> tuple[JSONValue, Mapping[str, Any] | None]:
        result = adapter(document.text, dataset, resolver, "", config=config)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, Mapping) or "training" not in result:
            raise AdapterFailure(f"Adapter returned an unexpected result for {document.title}")
        testing = result.get("testing")
        if testing is not None and not isinstance(testing, Mapping):
            raise AdapterFailure(f"Adapter returned a non-object testing dataset for {document.title}")
        return result["training"], testing
