"""Dataset format and generation option selection."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..compiler.config import (
    ADAPTER_FORMATS,
    DEFAULT_ADAPTER_FORMAT,
    DEFAULT_AUTO_ALIASES,
    DEFAULT_DISTRIBUTION,
    VALID_AUTO_ALIASES,
    VALID_DISTRIBUTIONS,
    CompileConfig,
    default_adapter_options,
)

__all__ = ["AdapterSelection"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AdapterSelection:
    """Which adapter runs and with which options.

    ``custom_options`` only matters while ``use_custom_options`` is set.
    """

    format: str = DEFAULT_ADAPTER_FORMAT
    use_custom_options: bool = False
    custom_options: dict[str, Any] | None = None
    default_distribution: str = DEFAULT_DISTRIBUTION
    auto_aliases: str = DEFAULT_AUTO_ALIASES
    known_formats: tuple[str, ...] = field(default=ADAPTER_FORMATS, repr=False)

    def set_format(self, adapter_format: str) -> None:
        """Switch format; custom options reset to that format's defaults.

        Re-selecting the current format keeps the edited options.
        """
        if adapter_format not in self.known_formats:
            raise ValueError(f"Unknown dataset format '{adapter_format}'")
        if adapter_format == self.format:
            return
        self.format = adapter_format
        self.custom_options = default_adapter_options(adapter_format)

    def set_use_custom_options(self, enabled: bool) -> None:
        self.use_custom_options = bool(enabled)
        self.custom_options = default_adapter_options(self.format)

    def set_custom_options(self, options: Mapping[str, Any] | None) -> None:
        self.custom_options = copy.deepcopy(dict(options)) if options is not None else None

    def set_default_distribution(self, distribution: str) -> None:
        if distribution not in VALID_DISTRIBUTIONS:
            raise ValueError(f"Unknown distribution '{distribution}'")
        self.default_distribution = distribution

    def set_auto_aliases(self, policy: str) -> None:
        if policy not in VALID_AUTO_ALIASES:
            raise ValueError(f"Unknown auto aliases policy '{policy}'")
        self.auto_aliases = policy

    def compile_config(self) -> CompileConfig:
        return CompileConfig(
            default_distribution=self.default_distribution,  # type: ignore[arg-type]
            auto_aliases=self.auto_aliases,  # type: ignore[arg-type]
        )

    def effective_options(self) -> dict[str, Any] | None:
        """Options to seed the first adapter call with, or ``None``.

        An enabled but empty ``{}`` still seeds the call.
        """
        if not self.use_custom_options or self.custom_options is None:
            return None
        return copy.deepcopy(self.custom_options)
