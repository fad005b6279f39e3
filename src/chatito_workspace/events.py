"""Event bus infrastructure for decoupled workspace communication.

Components publish small dataclass events describing what changed and other
components (the Qt window, tests, the CLI) subscribe to the ones they care
about without holding direct references to each other.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    TypeVar,
    TYPE_CHECKING,
)
from weakref import WeakMethod, ref

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all workspace events.

    Example::

        @dataclass(slots=True)
        class DocumentAdded(Event):
            index: int
            title: str
    """

    pass


# High-frequency event types that should not log each publish
_QUIET_EVENT_TYPES: set[type] = set()


# =============================================================================
# Document Events
# =============================================================================


@dataclass(slots=True)
class DocumentAdded(Event):
    """Emitted after a document is appended to the store.

    Attributes:
        index: Position of the new document.
        title: Title (import key) of the new document.
    """

    index: int
    title: str


@dataclass(slots=True)
class DocumentRemoved(Event):
    """Emitted after a document is removed from the store.

    Attributes:
        index: Position the document occupied before removal.
        title: Title of the removed document.
        replaced_with_default: True when the store re-inserted an empty default.
    """

    index: int
    title: str
    replaced_with_default: bool = False


@dataclass(slots=True)
class DocumentUpdated(Event):
    """Emitted whenever a document's text changes."""

    index: int
    title: str
    length: int


_QUIET_EVENT_TYPES.add(DocumentUpdated)


@dataclass(slots=True)
class ActiveDocumentChanged(Event):
    """Emitted when the selected document changes.

    Attributes:
        index: The newly active index.
        title: Title of the newly active document.
    """

    index: int
    title: str


# =============================================================================
# Validation & Export Events
# =============================================================================


@dataclass(slots=True)
class ValidationStateChanged(Event):
    """Emitted when the inline validation state is replaced.

    Attributes:
        kind: One of ``clean``, ``warning`` or ``error``.
        message: The message shown to the user, if any.
    """

    kind: str
    message: str | None = None


@dataclass(slots=True)
class ExportViewChanged(Event):
    """Emitted when the export drawer opens or closes."""

    visible: bool


@dataclass(slots=True)
class NoticePosted(Event):
    """Emitted for blocking notices the UI must surface to the user."""

    message: str


@dataclass(slots=True)
class DatasetExported(Event):
    """Emitted after both dataset artifacts were handed to the download sink."""

    training_name: str
    testing_name: str


@dataclass(slots=True)
class CompileFailed(Event):
    """Emitted when the compile pipeline aborts on a document."""

    document_index: int
    message: str


@dataclass(slots=True)
class AdapterSelectionChanged(Event):
    """Emitted when the dataset format or one of its options changes."""

    format: str
    use_custom_options: bool
    default_distribution: str
    auto_aliases: str


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Handlers are stored as weak references where possible (bound methods),
    so widgets that go away stop receiving events without unsubscribing.

    Example::

        bus = EventBus()
        bus.subscribe(DocumentAdded, lambda event: print(event.title))
        bus.publish(DocumentAdded(index=0, title="greet.chatito"))

    Thread Safety:
        Not thread-safe. All operations happen on the event loop thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register a handler to receive events of the specified type.

        Subscribing the same handler twice results in two invocations.
        """
        handler_ref = _HandlerRef.create(handler)
        self._handlers[event_type].append(handler_ref)
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler`` for ``event_type``.

        Safe to call for handlers that were never subscribed.
        """
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return

        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                logger.debug(
                    "Unsubscribed handler %s from event type %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
                return

    def publish(self, event: E) -> None:
        """Broadcast an event to all registered handlers.

        Handlers run synchronously in registration order. A handler that
        raises is logged and the remaining handlers still run.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        is_quiet = event_type in _QUIET_EVENT_TYPES

        if handlers is None:
            if not is_quiet:
                logger.debug("No handlers for event type %s", event_type.__name__)
            return

        if not is_quiet:
            logger.debug(
                "Publishing %s to %d handler(s)",
                event_type.__name__,
                len(handlers),
            )

        dead_indices: list[int] = []

        for i, handler_ref in enumerate(list(handlers)):
            handler = handler_ref.resolve()
            if handler is None:
                dead_indices.append(i)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for i in reversed(dead_indices):
            handlers.pop(i)

    def clear(self) -> None:
        """Remove all registered handlers."""
        self._handlers.clear()
        logger.debug("Cleared all event handlers")

    def handler_count(self, event_type: type[E] | None = None) -> int:
        """Return the number of registered handlers, optionally for one type."""
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Handler reference: ``WeakMethod`` for bound methods, strong otherwise."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: WeakMethod | ref | Handler, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref  # type: ignore[return-value]
        return self._ref()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Any) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        cls_name = type(handler.__self__).__name__
        return f"{cls_name}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DocumentAdded",
    "DocumentRemoved",
    "DocumentUpdated",
    "ActiveDocumentChanged",
    "ValidationStateChanged",
    "ExportViewChanged",
    "NoticePosted",
    "DatasetExported",
    "CompileFailed",
    "AdapterSelectionChanged",
]
