"""Tests for procedural arithmetic problems."""

from __future__ import annotations

import random

import pytest

from sprouts.learning.generator import ProblemGenerator
from sprouts.learning.math_problems import DIV, MUL, SUB, generate_math_problem, numeric_options

DIFFICULTIES = ["beginner", "intermediate", "advanced"]


def _evaluate(num1: int, operator: str, num2: int) -> int:
    if operator == MUL:
        return num1 * num2
    if operator == DIV:
        assert num1 % num2 == 0, "division must come out even"
        return num1 // num2
    if operator == SUB:
        return num1 - num2
    return num1 + num2


@pytest.mark.parametrize("level", range(1, 11))
@pytest.mark.parametrize("difficulty", DIFFICULTIES)
def test_math_problem_is_consistent(level, difficulty):
    """Options are three distinct numbers and the answer is the true result."""
    rng = random.Random(level * 31 + len(difficulty))
    for _ in range(40):
        problem = generate_math_problem(rng, level, difficulty)
        assert len(problem.options) == 3
        assert len(set(problem.options)) == 3
        assert problem.answer in problem.options
        assert int(problem.answer) == _evaluate(problem.num1, problem.operator, problem.num2)
        assert problem.prompt == f"{problem.num1} {problem.operator} {problem.num2} = ?"


@pytest.mark.parametrize("level, operators", [(1, {"+"}), (2, {"+"}), (3, {"-"}), (5, {"×"}), (8, {"×"})])
def test_level_table_operators(level, operators):
    rng = random.Random(99)
    seen = {generate_math_problem(rng, level, "intermediate").operator for _ in range(50)}
    assert seen == operators


def test_level_six_mixes_division_and_multiplication():
    rng = random.Random(5)
    seen = {generate_math_problem(rng, 6, "advanced").operator for _ in range(100)}
    assert seen == {"×", "÷"}


def test_level_three_never_negative():
    rng = random.Random(3)
    for _ in range(200):
        assert int(generate_math_problem(rng, 3, "advanced").answer) >= 0


def test_beginner_addition_stays_small():
    rng = random.Random(11)
    for _ in range(100):
        problem = generate_math_problem(rng, 1, "beginner")
        assert 2 <= int(problem.answer) <= 5
        assert problem.num1 >= 1 and problem.num2 >= 1


def test_missing_level_plays_as_level_one():
    rng = random.Random(2)
    for _ in range(30):
        assert generate_math_problem(rng, None, "beginner").operator == "+"


def test_numeric_options_near_answer():
    rng = random.Random(8)
    for answer in (0, 1, 7, 42, -3):
        options = numeric_options(rng, answer)
        assert answer in options
        assert len(set(options)) == 3
        assert all(abs(option - answer) <= 10 for option in options)


def test_generator_dispatches_math_pack(math_pack, rng):
    problem = ProblemGenerator(rng).generate(math_pack, "math", "garden", "beginner", level=5)
    assert problem.operator == "×"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
