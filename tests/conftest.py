"""Shared fixtures for the Sprouts engine tests."""

from __future__ import annotations

import random
import tempfile
from pathlib import Path
from typing import Optional

import pytest

from sprouts.config import Settings
from sprouts.content import load_pack
from sprouts.storage import KeyValueBackend, MemoryBackend
from sprouts.system import SproutsApp


class BrokenBackend(KeyValueBackend):
    """Backend whose every access fails, like storage disabled by the browser."""

    def get(self, key: str) -> Optional[str]:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("storage unavailable")


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def backend():
    """Fresh in-memory key-value backend."""
    return MemoryBackend()


@pytest.fixture
def broken_backend():
    return BrokenBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    """Seeded random source so generated problems are reproducible."""
    return random.Random(1234)


@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for file-backed storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def science_pack():
    return load_pack("science")


@pytest.fixture
def reading_pack():
    return load_pack("reading")


@pytest.fixture
def math_pack():
    return load_pack("math")


@pytest.fixture
def sprouts_app(backend, rng, clock):
    """Science app wired to the in-memory backend and a seeded random source."""
    return SproutsApp(Settings(), backend=backend, rng=rng, clock=clock, configure_logs=False)
