from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from sprouts.config.schema import GameConfig
from sprouts.data_models import ContentPack, Problem
from sprouts.learning.generator import ProblemGenerator
from sprouts.learning.models import ParentSettings, ProgressRecord
from sprouts.learning.parent_settings import ParentSettingsStore, resolve_selection
from sprouts.learning.progress import ProgressStore
from sprouts.learning.recent import RecentProblemGuard
from sprouts.utils.logging import get_logger

logger = get_logger(__name__)

COLLECTIBLES_PER_THEME = 8


@dataclass
class AnswerOutcome:
    """What happened after the learner tapped an option."""

    correct: bool
    message: str
    seeds: int
    level: int
    record: ProgressRecord
    leveled_up: bool = False
    collectible: Optional[str] = None
    session_over: bool = False


@dataclass
class GardenState:
    seeds: int = 0
    level: int = 1
    collected: List[str] = field(default_factory=list)
    target: str = ""


class GameSession:
    """
    One sitting of play: the current selection, problem, garden and break handling.

    Correct answers earn a seed; a full row of seeds grows the target collectible into the
    garden and advances the level (capped at ``max_level``). A wrong answer keeps the same
    problem on screen. When the session timer runs out the session either ends straight
    away or, with ``stopAfterCurrentQuestion`` set, after the next correct answer.
    """

    def __init__(
        self,
        pack: ContentPack,
        generator: ProblemGenerator,
        progress_store: ProgressStore,
        settings_store: ParentSettingsStore,
        game_config: Optional[GameConfig] = None,
        guard: Optional[RecentProblemGuard] = None,
        rng: Optional[random.Random] = None,
    ):
        self.pack = pack
        self.generator = generator
        self.progress_store = progress_store
        self.settings_store = settings_store
        self.config = game_config or GameConfig()
        self.guard = guard or RecentProblemGuard()
        self.rng = rng or generator.rng

        self.mode = self.config.default_mode or pack.mode_keys[0]
        self.theme = self.config.default_theme
        self.difficulty = self.config.default_difficulty
        self.garden = GardenState()
        self.problem = Problem.empty("")
        self.hinted_index: Optional[int] = None
        self.pending_end = False
        self.ended = False

    @property
    def parent_settings(self) -> ParentSettings:
        return self.settings_store.load_parent_settings()

    def start(self) -> Problem:
        """Count the session, snap the selection onto what parents allow and draw a problem."""
        self.progress_store.record_session_start()
        self.apply_parent_settings()
        self.garden.target = self._pick_collectible()
        logger.info(
            "session_started",
            pack=self.pack.id,
            mode=self.mode,
            theme=self.theme,
            difficulty=self.difficulty,
        )
        return self.new_problem()

    def apply_parent_settings(self) -> None:
        settings = self.parent_settings
        self.theme = resolve_selection(self.theme, settings.allowed_themes)
        self.difficulty = resolve_selection(self.difficulty, settings.allowed_difficulties)
        self.mode = resolve_selection(self.mode, settings.allowed_modes)

    def new_problem(self) -> Problem:
        self.problem = self.guard.next_problem(
            lambda: self.generator.generate(
                self.pack, self.mode, self.theme, self.difficulty, self.garden.level
            ),
            mode=self.mode,
            difficulty=self.difficulty,
            theme=self.theme,
        )
        self.hinted_index = None
        return self.problem

    def _selectable(self, value: str, allowed: List[str], locked: bool) -> bool:
        return not locked and value in allowed

    def select_mode(self, mode: str) -> bool:
        settings = self.parent_settings
        if mode not in self.pack.mode_keys:
            return False
        if not self._selectable(mode, settings.allowed_modes, settings.locks.game_mode):
            return False
        if mode != self.mode:
            self.mode = mode
            self.new_problem()
        return True

    def select_theme(self, theme: str) -> bool:
        settings = self.parent_settings
        if theme not in self.pack.themes:
            return False
        if not self._selectable(theme, settings.allowed_themes, settings.locks.theme):
            return False
        if theme != self.theme:
            self.theme = theme
            self.garden.target = self._pick_collectible()
            self.new_problem()
        return True

    def select_difficulty(self, difficulty: str) -> bool:
        settings = self.parent_settings
        if difficulty not in self.pack.difficulties:
            return False
        if not self._selectable(
            difficulty, settings.allowed_difficulties, settings.locks.difficulty
        ):
            return False
        if difficulty != self.difficulty:
            self.difficulty = difficulty
            self.new_problem()
        return True

    def answer(self, selected: str) -> AnswerOutcome:
        if self.ended:
            raise RuntimeError("session has already ended")
        if self.problem.is_empty:
            raise RuntimeError(f"no problem to answer: {self.problem.prompt}")

        correct = self.problem.is_correct(selected)
        record = self.progress_store.record_answer(
            correct=correct, difficulty=self.difficulty, mode=self.mode
        )
        if not correct:
            return AnswerOutcome(
                correct=False,
                message="Try again!",
                seeds=self.garden.seeds,
                level=self.garden.level,
                record=record,
            )

        self.garden.seeds += 1
        outcome = AnswerOutcome(
            correct=True,
            message="Correct!",
            seeds=self.garden.seeds,
            level=self.garden.level,
            record=record,
        )
        if self.pending_end:
            self.ended = True
            outcome.session_over = True
            return outcome

        if self.garden.seeds >= self.config.seeds_per_level:
            outcome.collectible = self.garden.target
            self.garden.collected.append(self.garden.target)
            self.garden.level = min(self.garden.level + 1, self.config.max_level)
            self.garden.seeds = 0
            self.garden.target = self._pick_collectible()
            outcome.leveled_up = True
            outcome.level = self.garden.level
            outcome.seeds = 0
            logger.info("level_up", level=self.garden.level, collectible=outcome.collectible)

        self.new_problem()
        return outcome

    def hint(self) -> Optional[int]:
        """Point at one wrong option, once per problem. Returns its index."""
        if self.hinted_index is not None:
            return self.hinted_index
        wrong = [
            index for index, option in enumerate(self.problem.options) if option != self.problem.answer
        ]
        if not wrong:
            return None
        self.hinted_index = self.rng.choice(wrong)
        return self.hinted_index

    def handle_time_up(self) -> None:
        if self.parent_settings.stop_after_current_question:
            self.pending_end = True
        else:
            self.ended = True

    def reset(self) -> Problem:
        """Start the garden over at level 1."""
        self.garden = GardenState(target=self._pick_collectible())
        return self.new_problem()

    def _pick_collectible(self) -> str:
        number = self.rng.randint(1, COLLECTIBLES_PER_THEME)
        return f"{self.theme}-collectible-{number}"
