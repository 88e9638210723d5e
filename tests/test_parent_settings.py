"""Tests for parent settings persistence, gating helpers and the PIN pad."""

from __future__ import annotations

import json

import pytest

from sprouts.learning.models import ParentSettings
from sprouts.learning.parent_settings import (
    ParentSettingsStore,
    PinPad,
    change_pin,
    resolve_selection,
    set_time_limit,
    toggle_allowed,
    toggle_lock,
)
from sprouts.storage import MemoryBackend

KEY = "science_sprouts_parent_settings"
MODES = ["vocab", "labs", "facts"]


@pytest.fixture
def store(backend):
    return ParentSettingsStore(backend, KEY, MODES)


def test_defaults(store):
    settings = store.load_parent_settings()
    assert settings.pin is None
    assert settings.session_time_limit == 0
    assert settings.stop_after_current_question is True
    assert settings.locks.theme is False and settings.locks.game_mode is False
    assert settings.allowed_themes == ["garden", "ocean", "space"]
    assert settings.allowed_difficulties == ["beginner", "intermediate", "advanced"]
    assert settings.allowed_modes == MODES


def test_mode_gate_follows_saved_settings(store):
    assert store.is_mode_allowed("labs")
    settings = store.load_parent_settings()
    store.save_parent_settings(settings.model_copy(update={"allowed_modes": ["vocab", "facts"]}))
    assert store.is_mode_allowed("labs") is False
    assert store.is_mode_allowed("vocab") is True


def test_gates_reload_on_every_call(backend, store):
    """A write through another store instance is visible to the next check."""
    other = ParentSettingsStore(backend, KEY, MODES)
    settings = other.load_parent_settings()
    other.save_parent_settings(
        settings.model_copy(update={"allowed_themes": ["space"], "allowed_difficulties": ["advanced"]})
    )
    assert store.is_theme_allowed("garden") is False
    assert store.is_theme_allowed("space") is True
    assert store.is_difficulty_allowed("beginner") is False


def test_blob_shape(store, backend):
    settings = toggle_lock(store.load_parent_settings(), "game_mode")
    store.save_parent_settings(change_pin(settings, "2468"))
    blob = json.loads(backend.get(KEY))
    assert blob["pin"] == "2468"
    assert blob["locks"] == {"theme": False, "difficulty": False, "gameMode": True}
    assert blob["allowedModes"] == MODES
    assert blob["stopAfterCurrentQuestion"] is True
    assert blob["sessionTimeLimit"] == 0


def test_partial_blob_merges_with_defaults():
    backend = MemoryBackend({KEY: json.dumps({"sessionTimeLimit": 15, "extraField": "kept"})})
    settings = ParentSettingsStore(backend, KEY, MODES).load_parent_settings()
    assert settings.session_time_limit == 15
    assert settings.allowed_modes == MODES


def test_unknown_keys_survive_a_save(store, backend):
    backend.set(KEY, json.dumps({"pin": "1234", "soundEnabled": False}))
    settings = toggle_lock(store.load_parent_settings(), "theme")
    store.save_parent_settings(settings)
    blob = json.loads(backend.get(KEY))
    assert blob["soundEnabled"] is False
    assert blob["locks"]["theme"] is True


@pytest.mark.parametrize("raw", ["{{{", json.dumps({"pin": "12ab"}), json.dumps({"sessionTimeLimit": -5})])
def test_bad_blob_falls_back_to_defaults(raw):
    settings = ParentSettingsStore(MemoryBackend({KEY: raw}), KEY, MODES).load_parent_settings()
    assert settings == ParentSettingsStore(MemoryBackend(), KEY, MODES).load_parent_settings()


def test_unavailable_storage(broken_backend):
    store = ParentSettingsStore(broken_backend, KEY, MODES)
    assert store.is_mode_allowed("facts") is True
    store.save_parent_settings(store.load_parent_settings())


# PIN pad


def test_first_pin_entry_sets_pin():
    pad = PinPad(None)
    assert pad.prompt == "Set Parent PIN"
    assert pad.enter("1357") is True
    assert pad.new_pin == "1357"


def test_matching_pin_authenticates():
    pad = PinPad("4321")
    assert pad.prompt == "Enter Parent PIN"
    assert pad.enter("4321") is True
    assert pad.new_pin is None


def test_wrong_pin_rejects_and_clears():
    pad = PinPad("4321")
    assert pad.enter("1234") is False
    assert pad.error is True
    assert pad.entered == ""
    assert pad.enter("4321") is True
    assert pad.error is False


def test_clear_and_backspace():
    pad = PinPad("9999")
    pad.enter("12")
    pad.backspace()
    assert pad.entered == "1"
    pad.clear()
    assert pad.entered == ""


def test_pad_rejects_non_digits():
    with pytest.raises(ValueError):
        PinPad(None).press("x")


def test_change_pin_requires_four_digits():
    settings = ParentSettings(pin="1111")
    assert change_pin(settings, "12").pin == "1111"
    assert change_pin(settings, "abcd").pin == "1111"
    assert change_pin(settings, "2222").pin == "2222"


# Settings helpers


def test_toggle_allowed_never_empties():
    settings = ParentSettings(allowed_themes=["garden", "ocean"])
    settings = toggle_allowed(settings, "allowed_themes", "garden")
    assert settings.allowed_themes == ["ocean"]
    settings = toggle_allowed(settings, "allowed_themes", "ocean")
    assert settings.allowed_themes == ["ocean"]
    settings = toggle_allowed(settings, "allowed_themes", "space")
    assert settings.allowed_themes == ["ocean", "space"]


def test_toggle_allowed_rejects_unknown_list():
    with pytest.raises(ValueError):
        toggle_allowed(ParentSettings(), "allowed_colors", "red")


def test_toggle_lock_flips():
    settings = toggle_lock(ParentSettings(), "difficulty")
    assert settings.locks.difficulty is True
    assert toggle_lock(settings, "difficulty").locks.difficulty is False
    with pytest.raises(ValueError):
        toggle_lock(settings, "volume")


def test_time_limit_choices():
    assert set_time_limit(ParentSettings(), 20).session_time_limit == 20
    with pytest.raises(ValueError):
        set_time_limit(ParentSettings(), 7)


def test_resolve_selection():
    assert resolve_selection("ocean", ["garden", "ocean"]) == "ocean"
    assert resolve_selection("space", ["garden", "ocean"]) == "garden"
    assert resolve_selection("space", []) == "space"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
