from __future__ import annotations

import copy
import json
from typing import Any, Dict, Mapping

from sprouts.storage.kv_store import KeyValueBackend
from sprouts.utils.logging import get_logger

logger = get_logger(__name__)


def merge_with_defaults(defaults: Mapping[str, Any], overlay: Any) -> Dict[str, Any]:
    """
    Shallow-overlay a persisted blob onto a defaults mapping.

    Top-level keys from ``overlay`` replace the default entry wholesale; nested mappings are
    not merged. Anything that is not a mapping is ignored, so the result is always a fresh
    copy of at least the defaults and neither input is mutated.
    """
    merged = copy.deepcopy(dict(defaults))
    if isinstance(overlay, Mapping):
        for key, value in overlay.items():
            merged[key] = copy.deepcopy(value)
    return merged


class JsonBlob:
    """One JSON document stored under a single key of a backend."""

    def __init__(self, backend: KeyValueBackend, storage_key: str, label: str):
        self.backend = backend
        self.storage_key = storage_key
        self.label = label

    def read(self, defaults: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the stored blob merged over ``defaults``; defaults alone on any failure."""
        try:
            raw = self.backend.get(self.storage_key)
            if raw is None:
                return merge_with_defaults(defaults, None)
            overlay = json.loads(raw)
        except Exception as exc:
            logger.error(
                f"{self.label}_load_failed",
                storage_key=self.storage_key,
                error=str(exc),
                exc_info=True,
            )
            return merge_with_defaults(defaults, None)
        return merge_with_defaults(defaults, overlay)

    def write(self, payload: Mapping[str, Any]) -> bool:
        """Serialize and store ``payload``; returns False (after logging) when the write is lost."""
        try:
            self.backend.set(self.storage_key, json.dumps(payload))
        except Exception as exc:
            logger.error(
                f"{self.label}_save_failed",
                storage_key=self.storage_key,
                error=str(exc),
                exc_info=True,
            )
            return False
        return True
