from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER = "{__}"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class VocabItem(_Frozen):
    """A term and the child-friendly definition the learner must match it to."""

    term: str
    definition: str = Field(alias="def")


class LabItem(_Frozen):
    """Fill-in-the-blank template with its correct word and distractors."""

    q: str
    a: str
    d: List[str] = Field(min_length=2)

    @field_validator("q")
    @classmethod
    def single_placeholder(cls, value: str) -> str:
        if value.count(PLACEHOLDER) != 1:
            raise ValueError(f"template must contain exactly one {PLACEHOLDER} placeholder")
        return value


class StoryItem(LabItem):
    """Reading-pack story sentence; same shape as a lab template but keyed ``t``."""

    q: str = Field(alias="t")


class FactItem(_Frozen):
    """One true statement and two false ones."""

    t: str
    f1: str
    f2: str


class ModeSpec(_Frozen):
    key: str
    label: str


class ContentBanks(_Frozen):
    """
    Question banks of a pack.

    Science packs fill ``vocab`` (theme -> difficulty -> items), ``labs`` (theme -> items)
    and ``facts`` (theme -> difficulty -> items). Reading packs fill ``words``
    (theme -> difficulty -> words), ``sightwords`` (difficulty -> words) and ``stories``
    (theme -> items). Math packs leave everything empty.
    """

    vocab: Dict[str, Dict[str, List[VocabItem]]] = Field(default_factory=dict)
    labs: Dict[str, List[LabItem]] = Field(default_factory=dict)
    facts: Dict[str, Dict[str, List[FactItem]]] = Field(default_factory=dict)
    words: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)
    sightwords: Dict[str, List[str]] = Field(default_factory=dict)
    stories: Dict[str, List[StoryItem]] = Field(default_factory=dict)


class ContentPack(_Frozen):
    """Static dataset of question banks for one Sprouts app."""

    id: str
    type: Literal["science", "reading", "math"]
    title: str
    modes: List[ModeSpec]
    themes: List[str]
    difficulties: List[str] = Field(
        default_factory=lambda: ["beginner", "intermediate", "advanced"]
    )
    banks: ContentBanks = Field(default_factory=ContentBanks)

    @field_validator("modes")
    @classmethod
    def at_least_one_mode(cls, value: List[ModeSpec]) -> List[ModeSpec]:
        if not value:
            raise ValueError("content pack must declare at least one mode")
        return value

    @property
    def mode_keys(self) -> List[str]:
        return [mode.key for mode in self.modes]

    def mode_label(self, key: str) -> str:
        for mode in self.modes:
            if mode.key == key:
                return mode.label
        return key
