"""Validation, import resolution and the multi-document compile pipeline."""

from __future__ import annotations

from .adapters import Adapter, AdapterRegistry, load_callable
from .config import CompileConfig, default_adapter_options
from .imports import ImportResolver, ResolvedImport
from .merge import merge_deep
from .pipeline import CompilationPipeline, CompilationResult, dump_dataset
from .validator import ValidationKind, ValidationOutcome, Validator

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "CompilationPipeline",
    "CompilationResult",
    "CompileConfig",
    "ImportResolver",
    "ResolvedImport",
    "ValidationKind",
    "ValidationOutcome",
    "Validator",
    "default_adapter_options",
    "dump_dataset",
    "load_callable",
    "merge_deep",
]
