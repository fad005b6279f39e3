"""Tests for the adapter selection model."""

from __future__ import annotations

import pytest

from chatito_workspace.compiler.config import CompileConfig
from chatito_workspace.workspace.selection import AdapterSelection


def test_set_format_resets_options_to_format_defaults() -> None:
    selection = AdapterSelection(use_custom_options=True, custom_options={"stale": True})
    selection.set_format("snips")
    assert selection.format == "snips"
    assert selection.custom_options == {"language": "en"}


def test_set_format_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        AdapterSelection().set_format("watson")


def test_toggle_custom_options_resets_to_defaults() -> None:
    selection = AdapterSelection(format="rasa", custom_options={"edited": 1})
    selection.set_use_custom_options(True)
    assert selection.use_custom_options is True
    assert selection.custom_options == {"rasa_nlu_data": {"regex_features": [], "entity_synonyms": []}}


def test_custom_options_are_copied() -> None:
    options = {"nested": {"a": 1}}
    selection = AdapterSelection(use_custom_options=True)
    selection.set_custom_options(options)
    options["nested"]["a"] = 2
    assert selection.custom_options == {"nested": {"a": 1}}


def test_reselecting_current_format_keeps_edited_options() -> None:
    edited = {"rasa_nlu_data": {"entity_synonyms": [{"value": "nyc"}]}}
    selection = AdapterSelection(format="rasa", use_custom_options=True, custom_options=edited)
    selection.set_format("rasa")
    assert selection.custom_options == edited


def test_effective_options() -> None:
    selection = AdapterSelection(custom_options={"language": "en"})
    assert selection.effective_options() is None
    selection.use_custom_options = True
    effective = selection.effective_options()
    assert effective == {"language": "en"}
    assert effective is not selection.custom_options


def test_enabled_empty_options_still_seed() -> None:
    assert AdapterSelection(use_custom_options=True, custom_options={}).effective_options() == {}
    assert AdapterSelection(use_custom_options=True, custom_options=None).effective_options() is None


def test_compile_config_reflects_choices() -> None:
    selection = AdapterSelection()
    selection.set_default_distribution("even")
    selection.set_auto_aliases("warn")
    assert selection.compile_config() == CompileConfig(default_distribution="even", auto_aliases="warn")


@pytest.mark.parametrize("method", ["set_default_distribution", "set_auto_aliases"])
def test_unknown_option_values_rejected(method: str) -> None:
    with pytest.raises(ValueError):
        getattr(AdapterSelection(), method)("bogus")
