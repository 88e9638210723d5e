from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueBackend(ABC):
    """Minimal string key-value storage that the progress and settings stores persist into."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string for ``key`` or None when nothing was written."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryBackend(KeyValueBackend):
    """In-process backend; nothing survives the interpreter."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data


class JsonFileBackend(KeyValueBackend):
    """
    Persist each key as ``<base_dir>/<key>.json``.

    Keys double as filenames, so only letters, digits, ``_``, ``-`` and ``.`` are accepted.
    The directory is created on construction. Reads and writes raise the usual ``OSError``
    family; the stores built on top are responsible for turning that into defaults.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the JSON file path backing ``key``."""
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Storage key not usable as a filename: {key!r}")
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        with path.open("w", encoding="utf-8") as handle:
            handle.write(value)
