"""Tests for the soft anti-repeat layer over the generator."""

from __future__ import annotations

from itertools import cycle

from sprouts.data_models import Problem
from sprouts.learning.recent import RecentProblemGuard, problem_key


def _problem(label: str) -> Problem:
    return Problem(prompt=f"Prompt {label}", options=[label, "x", "y"], answer=label)


class CountingDraw:
    def __init__(self, labels):
        self._labels = cycle(labels)
        self.calls = 0

    def __call__(self) -> Problem:
        self.calls += 1
        return _problem(next(self._labels))


def test_recent_repeat_is_redrawn():
    guard = RecentProblemGuard()
    first = guard.next_problem(lambda: _problem("a"), mode="vocab", difficulty="beginner", theme="garden")
    draw = CountingDraw(["a", "a", "b"])
    second = guard.next_problem(draw, mode="vocab", difficulty="beginner", theme="garden")
    assert first.answer == "a"
    assert second.answer == "b"
    assert draw.calls == 3


def test_repeat_accepted_after_retries_exhausted():
    guard = RecentProblemGuard(history_size=12, max_retries=25)
    guard.next_problem(lambda: _problem("a"), mode="labs", difficulty="beginner", theme="ocean")
    draw = CountingDraw(["a"])
    repeated = guard.next_problem(draw, mode="labs", difficulty="beginner", theme="ocean")
    assert repeated.answer == "a"
    assert draw.calls == 26


def test_key_includes_selection():
    """The same problem under a different theme does not count as a repeat."""
    guard = RecentProblemGuard()
    guard.next_problem(lambda: _problem("a"), mode="vocab", difficulty="beginner", theme="garden")
    draw = CountingDraw(["a"])
    guard.next_problem(draw, mode="vocab", difficulty="beginner", theme="space")
    assert draw.calls == 1


def test_history_keeps_last_twelve():
    guard = RecentProblemGuard(history_size=12)
    for index in range(20):
        guard.next_problem(
            lambda index=index: _problem(str(index)), mode="m", difficulty="d", theme="t"
        )
    keys = guard.recent_keys
    assert len(keys) == 12
    assert keys[0] == problem_key("m", "d", "t", _problem("8"))
    assert keys[-1] == problem_key("m", "d", "t", _problem("19"))


def test_key_format():
    assert problem_key("vocab", "beginner", "garden", _problem("a")) == "vocab|beginner|garden|Prompt a|a"
