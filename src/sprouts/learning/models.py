from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from sprouts.config.schema import DIFFICULTIES

DEFAULT_THEMES = ("garden", "ocean", "space")


class _Persisted(BaseModel):
    """
    Base for blobs stored with the camelCase keys the web apps already write.

    Keys this version does not know are kept and written back unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_blob(self) -> dict:
        return self.model_dump(by_alias=True)


class BucketStats(_Persisted):
    """Answered/correct counters for one difficulty or mode."""

    answered: int = Field(0, ge=0)
    correct: int = Field(0, ge=0)

    @model_validator(mode="after")
    def correct_within_answered(self) -> "BucketStats":
        if self.correct > self.answered:
            raise ValueError("correct cannot exceed answered")
        return self

    @property
    def accuracy(self) -> int:
        """Whole-number percentage of correct answers (0 when nothing was answered)."""
        if not self.answered:
            return 0
        return round(self.correct / self.answered * 100)


class ProgressRecord(_Persisted):
    """Cumulative performance counters for one installed app."""

    total_questions_answered: int = Field(0, ge=0)
    total_correct_answers: int = Field(0, ge=0)
    streak_best: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    sessions_count: int = Field(0, ge=0)
    total_play_time_seconds: int = Field(0, ge=0)
    last_played_at: Optional[int] = Field(None, description="Epoch milliseconds.")
    per_difficulty_stats: Dict[str, BucketStats] = Field(default_factory=dict)
    per_mode_stats: Dict[str, BucketStats] = Field(default_factory=dict)


class SettingsLocks(_Persisted):
    """Which selectors the child may not change."""

    theme: bool = False
    difficulty: bool = False
    game_mode: bool = False


class ParentSettings(_Persisted):
    """Parental-control configuration for one installed app."""

    pin: Optional[str] = None
    session_time_limit: int = Field(0, ge=0, description="Minutes; 0 means unlimited.")
    stop_after_current_question: bool = True
    locks: SettingsLocks = Field(default_factory=SettingsLocks)
    allowed_themes: List[str] = Field(default_factory=lambda: list(DEFAULT_THEMES))
    allowed_difficulties: List[str] = Field(default_factory=lambda: list(DIFFICULTIES))
    allowed_modes: List[str] = Field(default_factory=list)

    @field_validator("pin")
    @classmethod
    def four_digit_pin(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and (len(value) != 4 or not value.isdigit()):
            raise ValueError("pin must be exactly four digits")
        return value
