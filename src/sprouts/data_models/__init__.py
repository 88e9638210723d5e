from .content import ContentBanks, ContentPack, FactItem, LabItem, ModeSpec, StoryItem, VocabItem
from .problem import Problem

__all__ = [
    "ContentBanks",
    "ContentPack",
    "FactItem",
    "LabItem",
    "ModeSpec",
    "Problem",
    "StoryItem",
    "VocabItem",
]
