"""Packaged content packs shipped with the engine."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import List

import yaml
from pydantic import ValidationError

from sprouts.data_models import ContentPack

PACKS_PACKAGE = "sprouts.content.packs"


def available_packs() -> List[str]:
    """Return identifiers of every packaged content pack, sorted."""
    return sorted(
        Path(entry.name).stem
        for entry in resources.files(PACKS_PACKAGE).iterdir()
        if entry.name.endswith(".yaml")
    )


def parse_pack(text: str, source: str = "<string>") -> ContentPack:
    """Validate YAML text as a content pack, raising ValueError on malformed data."""
    data = yaml.safe_load(text) or {}
    try:
        return ContentPack.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid content pack {source}: {exc}") from exc


def load_pack_file(path: Path) -> ContentPack:
    """Load a content pack from an arbitrary YAML file on disk."""
    if not path.exists():
        raise FileNotFoundError(f"Content pack not found: {path}")
    return parse_pack(path.read_text(encoding="utf-8"), source=str(path))


@lru_cache(maxsize=None)
def load_pack(pack_id: str) -> ContentPack:
    """
    Load a packaged content pack by identifier.

    Packs are immutable, so the parsed pack is cached and shared by every caller.
    """
    resource = resources.files(PACKS_PACKAGE) / f"{pack_id}.yaml"
    if not resource.is_file():
        raise FileNotFoundError(
            f"Unknown content pack '{pack_id}'. Available: {', '.join(available_packs())}"
        )
    return parse_pack(resource.read_text(encoding="utf-8"), source=f"{pack_id}.yaml")


__all__ = ["available_packs", "load_pack", "load_pack_file", "parse_pack"]
