"""DSL validation: run the external parser and classify the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

__all__ = [
    "Parser",
    "ValidationKind",
    "ValidationOutcome",
    "Validator",
    "format_parse_error",
    "MISSING_COUNT_WARNING",
]

LOGGER = logging.getLogger(__name__)

INTENT_DEFINITION = "IntentDefinition"
MISSING_COUNT_WARNING = (
    "Warning: Limit the number of generated examples for intents. "
    "E.g.: %[{key}]('training': '100')"
)


class Parser(Protocol):
    """External DSL parser: returns top-level entities or raises on bad syntax."""

    def __call__(self, source: str) -> Sequence[Any]:
        ...


class ValidationKind(str, Enum):
    CLEAN = "clean"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class ValidationOutcome:
    """Result of validating one document's text."""

    kind: ValidationKind
    message: str | None = None

    @classmethod
    def clean(cls) -> "ValidationOutcome":
        return cls(ValidationKind.CLEAN)

    @classmethod
    def warning(cls, message: str) -> "ValidationOutcome":
        return cls(ValidationKind.WARNING, message)

    @classmethod
    def error(cls, message: str) -> "ValidationOutcome":
        return cls(ValidationKind.ERROR, message)

    @property
    def is_clean(self) -> bool:
        return self.kind is ValidationKind.CLEAN

    @property
    def is_blocking(self) -> bool:
        """Errors block export; warnings are advisory."""
        return self.kind is ValidationKind.ERROR

    @property
    def status_line(self) -> str:
        return self.message or "Correct syntax!"


class Validator:
    """Classifies DSL text as clean, warning or error using ``parser``."""

    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def validate(self, text: str) -> ValidationOutcome:
        if not text:
            return ValidationOutcome.clean()
        try:
            entities = self._parser(text)
        except Exception as exc:
            message = format_parse_error(exc)
            LOGGER.debug("Validator: parse failed: %s", message)
            return ValidationOutcome.error(message)

        for entity in entities or ():
            if _field(entity, "type") == INTENT_DEFINITION and _field(entity, "args") is None:
                key = _field(entity, "key")
                return ValidationOutcome.warning(MISSING_COUNT_WARNING.format(key=key))
        return ValidationOutcome.clean()


def format_parse_error(exc: BaseException) -> str:
    """Render a parser failure as ``"<Name>: <description>[ Line: L, Column: C]"``."""

    name = getattr(exc, "name", None) or type(exc).__name__
    description = getattr(exc, "message", None) or str(exc)
    start = _field(getattr(exc, "location", None), "start")
    line = _field(start, "line")
    column = _field(start, "column")
    if line is None or column is None:
        return f"{name}: {description}"
    return f"{name}: {description} Line: {line}, Column: {column}"


def _field(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)
