from __future__ import annotations

import random
import time
from pathlib import Path
from typing import Callable, Optional, Tuple

from sprouts.config import Settings, load_settings
from sprouts.content import load_pack
from sprouts.data_models import ContentPack
from sprouts.learning.game import GameSession
from sprouts.learning.generator import ProblemGenerator
from sprouts.learning.parent_settings import ParentSettingsStore
from sprouts.learning.progress import ProgressStore
from sprouts.learning.recent import RecentProblemGuard
from sprouts.learning.timer import SessionTimer
from sprouts.storage import JsonFileBackend, KeyValueBackend
from sprouts.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class SproutsApp:
    """
    Facade wiring one Sprouts app variant together.

    Holds the content pack, the storage backend, both persistent stores and a problem
    generator, all built from a :class:`Settings` object. Front ends (the CLI, tests) start
    play sessions through :meth:`start_session`.

    Attributes
    ----------
    settings : Settings
        Validated configuration.
    pack : ContentPack
        Shared read-only content pack for this app.
    backend : KeyValueBackend
        Where progress and parent settings blobs are persisted.
    progress_store : ProgressStore
        Cumulative counters under ``settings.app.resolved_progress_key()``.
    settings_store : ParentSettingsStore
        Parental controls under ``settings.app.resolved_parent_settings_key()``.
    generator : ProblemGenerator
        Problem source; shares ``rng`` with the sessions it feeds.
    """

    def __init__(
        self,
        settings: Settings,
        backend: Optional[KeyValueBackend] = None,
        pack: Optional[ContentPack] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        configure_logs: bool = True,
    ):
        self.settings = settings
        if configure_logs:
            configure_logging(
                settings.logging.level, settings.logging.use_json, app_id=settings.app.pack
            )

        self.pack = pack or load_pack(settings.app.pack)
        self.backend = backend or JsonFileBackend(settings.paths.data_dir)
        self.rng = rng or random.Random()
        self.progress_store = ProgressStore(
            self.backend,
            settings.app.resolved_progress_key(),
            self.pack.mode_keys,
            clock=clock,
        )
        self.settings_store = ParentSettingsStore(
            self.backend,
            settings.app.resolved_parent_settings_key(),
            self.pack.mode_keys,
        )
        self.generator = ProblemGenerator(self.rng)

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        backend: Optional[KeyValueBackend] = None,
    ) -> "SproutsApp":
        """Load settings from YAML (plus env overrides) and build the app."""
        settings = load_settings(config_path)
        return cls(settings, backend=backend)

    def new_session(self) -> GameSession:
        guard = RecentProblemGuard(
            history_size=self.settings.generator.recent_history,
            max_retries=self.settings.generator.max_retries,
        )
        return GameSession(
            self.pack,
            self.generator,
            self.progress_store,
            self.settings_store,
            game_config=self.settings.game,
            guard=guard,
            rng=self.rng,
        )

    def start_session(
        self, timer_clock: Callable[[], float] = time.monotonic
    ) -> Tuple[GameSession, SessionTimer]:
        """
        Begin play: count the session, draw the first problem and arm the session timer.

        The timer's limit comes from the parent settings at start time and its time-up
        callback is the session's break handling. Callers must ``close()`` the timer when
        play stops so the wall-clock duration is added to the progress record.
        """
        session = self.new_session()
        session.start()
        limit = session.parent_settings.session_time_limit
        timer = SessionTimer(
            self.progress_store.record_session_end,
            time_limit_minutes=limit,
            on_time_up=session.handle_time_up,
            clock=timer_clock,
        )
        return session, timer
