"""
Purpose: Turn the arc engine's category into a concrete question.
Why: Keep randomness out of the engine. The random source is injected so a
seeded generator gives reproducible sequences.

Dedup is best-effort: a drawn question already in the session's history
triggers up to `max_retries` redraws from a random phase-allowed category.
After that the last draw is returned even if it repeats.

Testing: Deterministic seeds or a scripted Random subclass; count draws.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Mapping, Optional

from ..catalog import QUESTION_BANK
from ..models import ArcState, Category
from .arc_engine import allowed_categories, decide

logger = logging.getLogger(__name__)

MAX_RETRIES = 5


@dataclass(frozen=True)
class Selection:
    question: str
    category: Category
    reason: str
    attempts: int  # total draws, initial one included


class QuestionSelector:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        bank: Mapping[Category, tuple[str, ...]] = QUESTION_BANK,
        max_retries: int = MAX_RETRIES,
    ):
        self.rng = rng or random.Random()
        self.bank = bank
        self.max_retries = max_retries

    def _draw(self, category: Category) -> str:
        return self.rng.choice(self.bank[category])

    def select(self, state: ArcState) -> Selection:
        decision = decide(state)
        category = decision.category
        question = self._draw(category)
        attempts = 1

        asked = set(state.question_history)
        retries = 0
        while question in asked and retries < self.max_retries:
            category = self.rng.choice(allowed_categories(state.question_count))
            question = self._draw(category)
            retries += 1
            attempts += 1

        if question in asked:
            logger.info(
                "Dedup gave up after %d retries; repeating %r", retries, question
            )

        return Selection(
            question=question,
            category=category,
            reason=decision.reason,
            attempts=attempts,
        )
