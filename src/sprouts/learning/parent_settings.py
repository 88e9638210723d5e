from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from sprouts.config.schema import DIFFICULTIES
from sprouts.learning.models import DEFAULT_THEMES, ParentSettings
from sprouts.storage.blob import JsonBlob
from sprouts.storage.kv_store import KeyValueBackend
from sprouts.utils.logging import get_logger

logger = get_logger(__name__)

PIN_LENGTH = 4
ALLOW_LIST_FIELDS = ("allowed_themes", "allowed_difficulties", "allowed_modes")
LOCK_FIELDS = ("theme", "difficulty", "game_mode")


class ParentSettingsStore:
    """
    Persist parental controls (PIN, session limit, locks, allow-lists) for one app.

    Loading follows the same merge-over-defaults, never-raise rule as
    :class:`~sprouts.learning.progress.ProgressStore`. The ``is_*_allowed`` checks reload
    the blob on every call so a saved change applies to the very next check.
    """

    def __init__(self, backend: KeyValueBackend, storage_key: str, allowed_modes: Iterable[str]):
        self.storage_key = storage_key
        self.allowed_modes: List[str] = list(allowed_modes)
        self._blob = JsonBlob(backend, storage_key, label="parent_settings")

    def default_blob(self) -> Dict[str, Any]:
        return {
            "pin": None,
            "sessionTimeLimit": 0,
            "stopAfterCurrentQuestion": True,
            "locks": {"theme": False, "difficulty": False, "gameMode": False},
            "allowedThemes": list(DEFAULT_THEMES),
            "allowedDifficulties": list(DIFFICULTIES),
            "allowedModes": list(self.allowed_modes),
        }

    def load_parent_settings(self) -> ParentSettings:
        merged = self._blob.read(self.default_blob())
        try:
            return ParentSettings.model_validate(merged)
        except ValidationError as exc:
            logger.error(
                "parent_settings_blob_invalid", storage_key=self.storage_key, error=str(exc)
            )
            return ParentSettings.model_validate(self.default_blob())

    def save_parent_settings(self, settings: ParentSettings) -> None:
        self._blob.write(settings.to_blob())

    def is_theme_allowed(self, theme: str) -> bool:
        return theme in self.load_parent_settings().allowed_themes

    def is_difficulty_allowed(self, difficulty: str) -> bool:
        return difficulty in self.load_parent_settings().allowed_difficulties

    def is_mode_allowed(self, mode: str) -> bool:
        return mode in self.load_parent_settings().allowed_modes


class PinPad:
    """
    Digit-entry state machine guarding the parent panel.

    With no PIN configured, the first four digits entered become the PIN and authenticate.
    Otherwise four digits must match exactly; a mismatch rejects and clears the input.
    """

    def __init__(self, correct_pin: Optional[str]):
        self.correct_pin = correct_pin
        self.entered = ""
        self.authenticated = False
        self.error = False
        self.new_pin: Optional[str] = None

    @property
    def prompt(self) -> str:
        return "Enter Parent PIN" if self.correct_pin else "Set Parent PIN"

    def press(self, digit: int | str) -> bool:
        """Append one digit; returns True once the pad has authenticated."""
        key = str(digit)
        if len(key) != 1 or not key.isdigit():
            raise ValueError(f"PIN pad only accepts single digits, got {digit!r}")
        if self.authenticated or len(self.entered) >= PIN_LENGTH:
            return self.authenticated
        self.error = False
        self.entered += key
        if len(self.entered) == PIN_LENGTH:
            if not self.correct_pin:
                self.new_pin = self.entered
                self.correct_pin = self.entered
                self.authenticated = True
            elif self.entered == self.correct_pin:
                self.authenticated = True
            else:
                self.error = True
                self.entered = ""
        return self.authenticated

    def enter(self, digits: str) -> bool:
        """Press each digit of ``digits`` in turn."""
        for digit in digits:
            self.press(digit)
        return self.authenticated

    def clear(self) -> None:
        self.entered = ""

    def backspace(self) -> None:
        self.entered = self.entered[:-1]


def change_pin(settings: ParentSettings, new_pin: str) -> ParentSettings:
    """Return settings with a replaced PIN; anything but four digits is ignored."""
    if len(new_pin) != PIN_LENGTH or not new_pin.isdigit():
        return settings
    return settings.model_copy(update={"pin": new_pin})


def toggle_lock(settings: ParentSettings, key: str) -> ParentSettings:
    if key not in LOCK_FIELDS:
        raise ValueError(f"Unknown lock '{key}'. Expected one of: {', '.join(LOCK_FIELDS)}")
    locks = settings.locks.model_copy(update={key: not getattr(settings.locks, key)})
    return settings.model_copy(update={"locks": locks})


def toggle_allowed(settings: ParentSettings, field: str, value: str) -> ParentSettings:
    """
    Add ``value`` to an allow-list, or remove it if present.

    Removing the last remaining entry is a no-op so every allow-list keeps at least one key.
    """
    if field not in ALLOW_LIST_FIELDS:
        raise ValueError(
            f"Unknown allow-list '{field}'. Expected one of: {', '.join(ALLOW_LIST_FIELDS)}"
        )
    current: List[str] = list(getattr(settings, field))
    if value in current:
        if len(current) <= 1:
            return settings
        updated = [entry for entry in current if entry != value]
    else:
        updated = current + [value]
    return settings.model_copy(update={field: updated})


def set_time_limit(
    settings: ParentSettings, minutes: int, choices: Sequence[int] = (0, 5, 10, 15, 20, 30)
) -> ParentSettings:
    if minutes not in choices:
        raise ValueError(f"Session limit must be one of {list(choices)} minutes")
    return settings.model_copy(update={"session_time_limit": minutes})


def resolve_selection(current: str, allowed: Sequence[str]) -> str:
    """Keep ``current`` when it is allowed, otherwise fall back to the first allowed entry."""
    if current in allowed or not allowed:
        return current
    return allowed[0]
