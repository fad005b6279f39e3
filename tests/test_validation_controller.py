"""Tests for the debounced validation controller."""

from __future__ import annotations

import asyncio

import pytest

from chatito_workspace.compiler.validator import ValidationKind, ValidationOutcome, Validator
from chatito_workspace.documents.model import Document
from chatito_workspace.documents.store import DocumentStore
from chatito_workspace.events import EventBus, ValidationStateChanged
from chatito_workspace.workspace.validation import DebouncedValidationController, ValidationPhase

from tests.helpers import FakeParser, ManualScheduler

GOOD = "%[greet]('training': '1')\n    hi\n"
WARN = "%[greet]\n    hi\n"
BAD = "%[greet]\n    !!\n"


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore([Document("a.chatito", GOOD), Document("b.chatito", BAD)])


@pytest.fixture
def validated() -> list[ValidationOutcome]:
    return []


@pytest.fixture
def controller(
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
    validated: list[ValidationOutcome],
) -> DebouncedValidationController:
    return DebouncedValidationController(
        store,
        Validator(parser),
        scheduler=scheduler,
        delay=0.3,
        on_validated=validated.append,
    )


def test_validation_waits_for_quiet_period(
    controller: DebouncedValidationController,
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
) -> None:
    store.update(0, WARN)
    controller.notify_text_changed()
    assert controller.phase is ValidationPhase.PENDING

    scheduler.advance(0.2)
    assert parser.calls == []

    scheduler.advance(0.1)
    assert parser.calls == [WARN]
    assert controller.state.kind is ValidationKind.WARNING
    assert controller.phase is ValidationPhase.VALIDATED


def test_burst_of_edits_validates_latest_text_once(
    controller: DebouncedValidationController,
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
    validated: list[ValidationOutcome],
) -> None:
    for text in ("%[", "%[gr", BAD):
        store.update(0, text)
        controller.notify_text_changed()
        scheduler.advance(0.1)

    assert parser.calls == []
    scheduler.advance(0.3)

    assert parser.calls == [BAD]
    assert controller.state.kind is ValidationKind.ERROR
    assert len(validated) == 1
    assert scheduler.pending == 0


def test_fire_reads_active_document_at_fire_time(
    controller: DebouncedValidationController,
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
) -> None:
    controller.notify_text_changed()
    store.set_active(1)
    scheduler.advance(0.3)
    assert parser.calls == [BAD]
    assert controller.state.is_blocking


def test_empty_text_clears_state_without_persisting(
    controller: DebouncedValidationController,
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
    validated: list[ValidationOutcome],
) -> None:
    controller.set_state(ValidationOutcome.error("old"))
    store.update(0, "")
    controller.notify_text_changed()
    scheduler.advance(0.3)

    assert controller.state == ValidationOutcome.clean()
    assert controller.phase is ValidationPhase.IDLE
    assert parser.calls == []
    assert validated == []


def test_state_changes_are_published_once(store: DocumentStore, parser: FakeParser, scheduler: ManualScheduler) -> None:
    bus = EventBus()
    events: list[ValidationStateChanged] = []
    bus.subscribe(ValidationStateChanged, events.append)
    controller = DebouncedValidationController(store, Validator(parser), scheduler=scheduler, event_bus=bus)

    store.update(0, WARN)
    controller.notify_text_changed()
    scheduler.advance(0.3)
    controller.notify_text_changed()
    scheduler.advance(0.3)

    assert len(events) == 1
    assert events[0].kind == "warning"


def test_cancel_and_flush(
    controller: DebouncedValidationController,
    store: DocumentStore,
    parser: FakeParser,
    scheduler: ManualScheduler,
) -> None:
    controller.notify_text_changed()
    controller.cancel()
    assert controller.phase is ValidationPhase.IDLE
    scheduler.advance(1)
    assert parser.calls == []

    store.update(0, WARN)
    controller.notify_text_changed()
    outcome = controller.flush()
    assert outcome.kind is ValidationKind.WARNING
    assert parser.calls == [WARN]


def test_without_loop_or_scheduler_validates_immediately(store: DocumentStore, parser: FakeParser) -> None:
    controller = DebouncedValidationController(store, Validator(parser))
    controller.notify_text_changed()
    assert parser.calls == [GOOD]
    assert controller.state.is_clean


@pytest.mark.asyncio
async def test_uses_running_event_loop(store: DocumentStore, parser: FakeParser) -> None:
    controller = DebouncedValidationController(store, Validator(parser), delay=0.01)
    store.update(0, WARN)
    controller.notify_text_changed()
    assert parser.calls == []

    await asyncio.sleep(0.05)

    assert parser.calls == [WARN]
    assert controller.state.kind is ValidationKind.WARNING
