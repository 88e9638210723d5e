"""
Sprouts engine.

Shared content packs, problem generation, progress and parent-settings persistence and
session timing for the Sprouts family of children's quiz apps.
"""

from .config.loader import load_settings
from .content import available_packs, load_pack

__all__ = ["available_packs", "load_pack", "load_settings"]
