from __future__ import annotations

import random
from typing import List, Optional, Tuple

from sprouts.data_models import Problem

ADD, SUB, MUL, DIV = "+", "-", "×", "÷"

_BASE_MAX = {"beginner": 5, "intermediate": 15, "advanced": 30}


def _by_difficulty(difficulty: str, beginner: int, intermediate: int, other: int) -> int:
    if difficulty == "beginner":
        return beginner
    if difficulty == "intermediate":
        return intermediate
    return other


def _pick_operands(rng: random.Random, level: int, difficulty: str) -> Tuple[int, int, int, str]:
    """Return ``(num1, num2, answer, operator)`` for the level's behaviour."""
    top = _BASE_MAX.get(difficulty, 10)

    if level == 1:
        answer = rng.randint(2, top)
        num1 = rng.randint(1, answer - 1)
        return num1, answer - num1, answer, ADD

    if level == 2:
        answer = rng.randint(2, int(top * 1.5))
        num1 = rng.randint(1, answer - 1)
        return num1, answer - num1, answer, ADD

    if level == 3:
        num1 = rng.randint(5, top + 4)
        num2 = rng.randint(1, num1)
        return num1, num2, num1 - num2, SUB

    if level == 4:
        # answer may be negative
        num1 = rng.randrange(top)
        num2 = rng.randrange(top)
        return num1, num2, num1 - num2, SUB

    if level == 5:
        factor_max = _by_difficulty(difficulty, 5, 9, 12)
        num1 = rng.randint(1, factor_max)
        num2 = rng.randint(1, factor_max)
        return num1, num2, num1 * num2, MUL

    if level == 6:
        if rng.random() > 0.5:
            divisor_max = _by_difficulty(difficulty, 5, 10, 12)
            quotient = rng.randint(1, divisor_max)
            divisor = rng.randint(1, divisor_max)
            return quotient * divisor, divisor, quotient, DIV
        factor_max = _by_difficulty(difficulty, 6, 10, 15)
        num1 = rng.randint(1, factor_max)
        num2 = rng.randint(1, factor_max)
        return num1, num2, num1 * num2, MUL

    if level == 7:
        mix_max = top * 2
        if rng.random() > 0.5:
            num1 = rng.randint(1, mix_max)
            num2 = rng.randint(1, mix_max)
            return num1, num2, num1 + num2, ADD
        num1 = rng.randint(mix_max, 2 * mix_max - 1)
        num2 = rng.randint(1, mix_max)
        return num1, num2, num1 - num2, SUB

    if level == 8:
        num1 = rng.randint(5, 9) if difficulty == "beginner" else rng.randint(5, 14)
        num2 = rng.randint(1, 10)
        return num1, num2, num1 * num2, MUL

    roll = rng.random()
    if roll < 0.25:
        num1, num2 = rng.randrange(50), rng.randrange(50)
        return num1, num2, num1 + num2, ADD
    if roll < 0.5:
        num1, num2 = rng.randrange(100), rng.randrange(50)
        return num1, num2, num1 - num2, SUB
    if roll < 0.75:
        num1, num2 = rng.randrange(12), rng.randrange(12)
        return num1, num2, num1 * num2, MUL
    quotient = rng.randint(1, 12)
    divisor = rng.randint(1, 12)
    return quotient * divisor, divisor, quotient, DIV


def numeric_options(rng: random.Random, answer: int) -> List[int]:
    """
    Collect the answer plus two distinct near-miss values.

    Each round draws an offset in -5..+5 (zero is rejected) and, if still short, tries the
    answer shifted by 10 in a random direction. The result is shuffled.
    """
    options = [answer]
    while len(options) < 3:
        fake = answer + rng.randint(-5, 5)
        if fake != answer and fake not in options:
            options.append(fake)
        if len(options) < 3:
            jump = answer + (10 if rng.random() > 0.5 else -10)
            if jump not in options:
                options.append(jump)
    rng.shuffle(options)
    return options


def generate_math_problem(
    rng: random.Random, level: Optional[int], difficulty: str
) -> Problem:
    """
    Synthesize an arithmetic problem for a garden level.

    Levels 1-2 add, 3-4 subtract, 5 multiplies, 6 mixes division and multiplication, 7 mixes
    addition and subtraction, 8 drills larger times tables and anything above 8 is a random
    mix of all four operators. A missing or non-positive level plays as level 1.
    """
    effective_level = level if level and level > 0 else 1
    num1, num2, answer, operator = _pick_operands(rng, effective_level, difficulty)
    options = numeric_options(rng, answer)
    return Problem(
        prompt=f"{num1} {operator} {num2} = ?",
        options=[str(value) for value in options],
        answer=str(answer),
        num1=num1,
        num2=num2,
        operator=operator,
    )
