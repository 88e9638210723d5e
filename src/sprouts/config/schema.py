from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DIFFICULTIES = ("beginner", "intermediate", "advanced")


class AppConfig(BaseModel):
    """Which content pack the app serves and where its blobs live in storage."""

    pack: str = Field("science", description="Packaged content pack identifier.")
    progress_key: Optional[str] = Field(
        None, description="Storage key for the progress blob (defaults to <pack>_sprouts_progress)."
    )
    parent_settings_key: Optional[str] = Field(
        None,
        description="Storage key for parent settings (defaults to <pack>_sprouts_parent_settings).",
    )

    def resolved_progress_key(self) -> str:
        return self.progress_key or f"{self.pack}_sprouts_progress"

    def resolved_parent_settings_key(self) -> str:
        return self.parent_settings_key or f"{self.pack}_sprouts_parent_settings"


class GeneratorConfig(BaseModel):
    """Anti-repeat tuning applied on top of the problem generator."""

    recent_history: int = Field(12, ge=1)
    max_retries: int = Field(25, ge=0)


class GameConfig(BaseModel):
    """Garden progression and the starting selection for a new session."""

    seeds_per_level: int = Field(10, ge=1)
    max_level: int = Field(9, ge=1)
    default_theme: str = "garden"
    default_difficulty: str = "intermediate"
    default_mode: Optional[str] = Field(
        None, description="Starting mode; the pack's first mode when unset."
    )
    time_limit_choices: List[int] = Field(default_factory=lambda: [0, 5, 10, 15, 20, 30])

    @field_validator("default_difficulty")
    @classmethod
    def known_difficulty(cls, value: str) -> str:
        """Reject difficulties the stores have no bucket for."""
        if value not in DIFFICULTIES:
            raise ValueError(f"default_difficulty must be one of {', '.join(DIFFICULTIES)}")
        return value

    @field_validator("time_limit_choices")
    @classmethod
    def non_negative_limits(cls, value: List[int]) -> List[int]:
        if any(minutes < 0 for minutes in value):
            raise ValueError("time_limit_choices must be non-negative minutes")
        return value


class PathsConfig(BaseModel):
    """Filesystem layout for persisted blobs."""

    data_dir: Path = Field(Path("data/sprouts"))


class LoggingConfig(BaseModel):
    """Controls for log level and output format."""

    level: str = Field("INFO")
    use_json: bool = False


class Settings(BaseModel):
    """Top-level configuration aggregating all sub-settings."""

    project_name: str = Field("Sprouts")
    app: AppConfig = Field(default_factory=AppConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    game: GameConfig = Field(default_factory=GameConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
