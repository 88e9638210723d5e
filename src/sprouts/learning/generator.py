from __future__ import annotations

import random
from typing import Callable, List, Optional, Sequence, TypeVar

from sprouts.data_models import ContentPack, LabItem, Problem
from sprouts.data_models.content import PLACEHOLDER
from sprouts.learning.math_problems import generate_math_problem

T = TypeVar("T")

BLANK = "____"
UNKNOWN_MODE = "Unknown mode."
UNKNOWN_TYPE = "Unknown content type."

GenerateFn = Callable[..., Problem]


def _reading_difficulty(difficulty: str) -> str:
    if difficulty in ("beginner", "advanced"):
        return difficulty
    return "intermediate"


class ProblemGenerator:
    """
    Turn a content pack request into a three-option multiple-choice :class:`Problem`.

    The random source is injected so tests can replay a fixed sequence; production code
    passes a default ``random.Random()``. Lookups that find no content (unknown theme or
    difficulty, empty bank) return a sentinel problem with no options instead of raising.

    Option lists from fill-in-the-blank and true-statement banks are lowercased but not
    de-duplicated, so a bank entry whose distractor differs from the answer only by case
    yields repeated options.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _pick(self, items: Sequence[T]) -> Optional[T]:
        if not items:
            return None
        return self.rng.choice(items)

    def _shuffled(self, items: Sequence[T]) -> List[T]:
        copy = list(items)
        self.rng.shuffle(copy)
        return copy

    def generate(
        self,
        pack: ContentPack,
        mode: str,
        theme: str,
        difficulty: str,
        level: Optional[int] = None,
    ) -> Problem:
        if pack.type == "math":
            return generate_math_problem(self.rng, level, difficulty)
        if pack.type == "science":
            return self._science(pack, mode, theme, difficulty)
        if pack.type == "reading":
            return self._reading(pack, mode, theme, difficulty)
        return Problem.empty(UNKNOWN_TYPE)

    def bind(self, pack: ContentPack) -> GenerateFn:
        """Return ``generate`` with ``pack`` fixed, for callers that serve a single app."""

        def generate_problem(
            mode: str, theme: str, difficulty: str, level: Optional[int] = None
        ) -> Problem:
            return self.generate(pack, mode, theme, difficulty, level)

        return generate_problem

    # Science packs

    def _science(self, pack: ContentPack, mode: str, theme: str, difficulty: str) -> Problem:
        banks = pack.banks
        if mode == "vocab":
            return self.vocab(banks.vocab.get(theme, {}).get(difficulty, []))
        if mode == "labs":
            return self.fill_blank(banks.labs.get(theme, []))
        if mode == "facts":
            return self.true_statement(banks.facts.get(theme, {}).get(difficulty, []))
        return Problem.empty(UNKNOWN_MODE)

    def vocab(self, bank: Sequence) -> Problem:
        item = self._pick(bank)
        if item is None:
            return Problem.empty()

        correct = item.term.lower()
        pool = [entry.term.lower() for entry in bank if entry.term.lower() != correct]
        distractors = self._shuffled(pool)[:2]
        options = self._shuffled([correct, *distractors])[:3]
        return Problem(
            prompt=f'Which word matches: "{item.definition}"',
            options=options,
            answer=correct,
        )

    def fill_blank(self, bank: Sequence[LabItem]) -> Problem:
        template = self._pick(bank)
        if template is None:
            return Problem.empty()

        options = [word.lower() for word in self._shuffled([template.a, *template.d])][:3]
        return Problem(
            prompt=template.q.replace(PLACEHOLDER, BLANK, 1),
            options=options,
            answer=template.a.lower(),
        )

    def true_statement(self, bank: Sequence) -> Problem:
        item = self._pick(bank)
        if item is None:
            return Problem.empty()

        options = [text.lower() for text in self._shuffled([item.t, item.f1, item.f2])][:3]
        return Problem(prompt="Which statement is TRUE?", options=options, answer=item.t.lower())

    # Reading packs

    def _reading(self, pack: ContentPack, mode: str, theme: str, difficulty: str) -> Problem:
        banks = pack.banks
        level_key = _reading_difficulty(difficulty)
        if mode == "phonics":
            theme_words = banks.words.get(theme, {})
            return self.phonics(
                theme_words.get(level_key, []), theme_words.get("beginner", [])
            )
        if mode == "sight":
            neighbour = "intermediate" if level_key == "advanced" else "beginner"
            return self.sight_word(
                banks.sightwords.get(level_key, []), banks.sightwords.get(neighbour, [])
            )
        if mode == "story":
            problem = self.fill_blank(banks.stories.get(theme, []))
            if problem.is_empty:
                return Problem.empty("No stories loaded.")
            return problem
        return Problem.empty(UNKNOWN_MODE)

    def phonics(self, words: Sequence[str], fallback_words: Sequence[str]) -> Problem:
        correct = self._pick(words)
        if not correct:
            return Problem.empty("No words loaded.")

        letter = correct[0].upper()
        pool = [word for word in words if word != correct and word[0].upper() != letter]
        distractors = self._shuffled(pool)[:2]
        fallback_pool = [
            word for word in fallback_words if word != correct and word[0].upper() != letter
        ]
        while len(distractors) < 2:
            fallback = self._pick(fallback_pool)
            if not fallback or fallback in distractors:
                break
            distractors.append(fallback)

        options = [word.lower() for word in self._shuffled([correct, *distractors])]
        return Problem(
            prompt=f'Which word starts with "{letter}"?',
            options=options,
            answer=correct.lower(),
        )

    def sight_word(self, words: Sequence[str], neighbour_words: Sequence[str]) -> Problem:
        picked = self._pick(words)
        target = picked.lower() if picked else ""
        if not target:
            return Problem.empty("No sight words loaded.")

        same = [word.lower() for word in words if word.lower() != target]
        pool = self._shuffled(same + [word.lower() for word in neighbour_words])
        candidates = list(dict.fromkeys(word for word in pool if word != target))
        first = candidates[0] if len(candidates) > 0 else self._pick(words)
        second = candidates[1] if len(candidates) > 1 else self._pick(words)
        options = self._shuffled([(word or "").lower() for word in (target, first, second)])[:3]
        return Problem(
            prompt=f'Tap the sight word: "{target}"',
            options=options,
            answer=target,
        )
