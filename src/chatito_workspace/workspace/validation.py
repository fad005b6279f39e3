"""Debounced, latest-text-wins validation of the active document."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable

from ..compiler.validator import ValidationOutcome, Validator
from ..documents.store import DocumentStore
from ..events import EventBus, ValidationStateChanged
from .capabilities import Scheduler, TimerHandle

__all__ = ["ValidationPhase", "DebouncedValidationController", "DEFAULT_DEBOUNCE_SECONDS"]

LOGGER = logging.getLogger(__name__)
DEFAULT_DEBOUNCE_SECONDS = 0.3


class ValidationPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    VALIDATED = "validated"


class DebouncedValidationController:
    """Trailing-edge debounce in front of :class:`Validator`.

    The timer callback looks the active document up in the store when it
    fires, so a fire that outlives a tab switch or close validates whatever
    is active now instead of a stale snapshot.

    Events Emitted:
        - ValidationStateChanged: Whenever the displayed state changes
    """

    def __init__(
        self,
        store: DocumentStore,
        validator: Validator,
        *,
        scheduler: Scheduler | None = None,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        event_bus: EventBus | None = None,
        on_validated: Callable[[ValidationOutcome], None] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Document store the active text is read from at fire time.
            validator: Validator run against that text.
            scheduler: Object exposing ``call_later``; defaults to the running
                asyncio loop at schedule time.
            delay: Debounce window in seconds.
            event_bus: Bus for ``ValidationStateChanged``; defaults to the store's.
            on_validated: Called after a non-empty validation updated the
                state (the persistence hook).
        """
        self._store = store
        self._validator = validator
        self._scheduler = scheduler
        self._delay = delay
        self._bus = event_bus or store.event_bus
        self._on_validated = on_validated
        self._handle: TimerHandle | None = None
        self._phase = ValidationPhase.IDLE
        self._state = ValidationOutcome.clean()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> ValidationPhase:
        return self._phase

    @property
    def state(self) -> ValidationOutcome:
        return self._state

    @property
    def delay(self) -> float:
        return self._delay

    def set_state(self, outcome: ValidationOutcome) -> None:
        """Replace the displayed state, publishing only real changes."""
        if outcome == self._state:
            return
        self._state = outcome
        self._bus.publish(ValidationStateChanged(kind=outcome.kind.value, message=outcome.message))

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def notify_text_changed(self) -> None:
        """Restart the debounce window after an edit of the active document."""
        self.cancel()
        scheduler = self._resolve_scheduler()
        if scheduler is None:
            LOGGER.debug("DebouncedValidationController: no event loop; validating immediately")
            self._fire()
            return
        self._handle = scheduler.call_later(self._delay, self._fire)
        self._phase = ValidationPhase.PENDING

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._phase is ValidationPhase.PENDING:
            self._phase = ValidationPhase.IDLE

    def flush(self) -> ValidationOutcome:
        """Run a pending validation now; returns the resulting state."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        return self._state

    def _resolve_scheduler(self) -> Scheduler | None:
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _fire(self) -> None:
        self._handle = None
        text = self._store.active_document.text
        if not text:
            self.set_state(ValidationOutcome.clean())
            self._phase = ValidationPhase.IDLE
            return

        outcome = self._validator.validate(text)
        self.set_state(outcome)
        self._phase = ValidationPhase.VALIDATED
        LOGGER.debug(
            "DebouncedValidationController: %s -> %s",
            self._store.active_document.title,
            outcome.kind.value,
        )
        if self._on_validated is not None:
            self._on_validated(outcome)
