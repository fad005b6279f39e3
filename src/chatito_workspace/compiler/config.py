"""Compile-time configuration values and the adapter option defaults."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Literal, Union

__all__ = [
    "JSONValue",
    "JSONObject",
    "DistributionType",
    "AutoAliasesType",
    "AdapterFormat",
    "ADAPTER_FORMATS",
    "VALID_DISTRIBUTIONS",
    "VALID_AUTO_ALIASES",
    "DEFAULT_ADAPTER_FORMAT",
    "DEFAULT_DISTRIBUTION",
    "DEFAULT_AUTO_ALIASES",
    "CompileConfig",
    "default_adapter_options",
]

JSONValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]
JSONObject = dict[str, Any]

DistributionType = Literal["regular", "even"]
AutoAliasesType = Literal["allow", "warn", "restrict"]
AdapterFormat = Literal["default", "rasa", "snips", "luis"]

ADAPTER_FORMATS: tuple[str, ...] = ("default", "rasa", "snips", "luis")
VALID_DISTRIBUTIONS: tuple[str, ...] = ("regular", "even")
VALID_AUTO_ALIASES: tuple[str, ...] = ("allow", "warn", "restrict")
DEFAULT_ADAPTER_FORMAT: AdapterFormat = "default"
DEFAULT_DISTRIBUTION: DistributionType = "regular"
DEFAULT_AUTO_ALIASES: AutoAliasesType = "allow"

_RASA_DEFAULT_OPTIONS: JSONObject = {
    "rasa_nlu_data": {
        "regex_features": [],
        "entity_synonyms": [],
    }
}
_SNIPS_DEFAULT_OPTIONS: JSONObject = {"language": "en"}
_DEFAULT_OPTIONS: dict[str, JSONObject] = {
    "rasa": _RASA_DEFAULT_OPTIONS,
    "snips": _SNIPS_DEFAULT_OPTIONS,
}


@dataclass(slots=True, frozen=True)
class CompileConfig:
    """Generation settings threaded into every adapter call.

    Attributes:
        default_distribution: Frequency distribution used when a sentence
            does not declare one (``regular`` or ``even``).
        auto_aliases: Policy for undefined alias references
            (``allow``, ``warn`` or ``restrict``).
    """

    default_distribution: DistributionType = DEFAULT_DISTRIBUTION
    auto_aliases: AutoAliasesType = DEFAULT_AUTO_ALIASES

    def __post_init__(self) -> None:
        if self.default_distribution not in VALID_DISTRIBUTIONS:
            raise ValueError(f"Unknown distribution '{self.default_distribution}'")
        if self.auto_aliases not in VALID_AUTO_ALIASES:
            raise ValueError(f"Unknown auto aliases policy '{self.auto_aliases}'")


def default_adapter_options(adapter_format: str) -> JSONObject:
    """Return a fresh copy of the documented option defaults for ``adapter_format``."""

    return copy.deepcopy(_DEFAULT_OPTIONS.get(adapter_format, {}))
