from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

NO_QUESTIONS = "No questions loaded."


class Problem(BaseModel):
    """
    One renderable multiple-choice question.

    ``options`` holds exactly three lowercase strings and ``answer`` is one of them.
    An empty ``options`` list means no content was available for the request; the
    prompt then explains why. Math problems also carry their operands and operator.
    """

    prompt: str
    options: List[str] = Field(default_factory=list)
    answer: str = ""
    num1: Optional[int] = None
    num2: Optional[int] = None
    operator: Optional[str] = None

    @classmethod
    def empty(cls, prompt: str = NO_QUESTIONS) -> "Problem":
        return cls(prompt=prompt, options=[], answer="")

    @property
    def is_empty(self) -> bool:
        return not self.options

    def is_correct(self, selected: str) -> bool:
        if self.is_empty:
            return False
        return selected == self.answer
