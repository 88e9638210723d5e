from __future__ import annotations

from collections import deque
from typing import Callable, Deque

from sprouts.data_models import Problem


def problem_key(mode: str, difficulty: str, theme: str, problem: Problem) -> str:
    return f"{mode}|{difficulty}|{theme}|{problem.prompt}|{problem.answer}"


class RecentProblemGuard:
    """
    Soft protection against showing the same problem again too soon.

    A freshly drawn problem is redrawn up to ``max_retries`` times while its key matches one
    of the last ``history_size`` keys issued. After the retries run out the last draw is
    accepted anyway, so repeats are unlikely but never impossible.
    """

    def __init__(self, history_size: int = 12, max_retries: int = 25):
        self.history_size = history_size
        self.max_retries = max_retries
        self._recent: Deque[str] = deque(maxlen=history_size)

    @property
    def recent_keys(self) -> list[str]:
        return list(self._recent)

    def clear(self) -> None:
        self._recent.clear()

    def next_problem(
        self,
        draw: Callable[[], Problem],
        *,
        mode: str,
        difficulty: str,
        theme: str,
    ) -> Problem:
        """Draw a problem, retrying on recent repeats, and remember its key."""
        seen = set(self._recent)
        candidate = draw()
        key = problem_key(mode, difficulty, theme, candidate)
        tries = 0
        while tries < self.max_retries and key in seen:
            candidate = draw()
            key = problem_key(mode, difficulty, theme, candidate)
            tries += 1
        self._recent.append(key)
        return candidate
