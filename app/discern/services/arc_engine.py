"""
Purpose: Decide which category the next question comes from.
Question count governs the arc; signals only steer within a phase.

Phases:
- 1 (count == 1): grounding only.
- 2 (count == 2): signal-driven, commitment never allowed.
- 3 (count >= 3): signal-driven, commitment behind a one-way gate.

The engine is a pure function of an ArcState snapshot: no I/O, no randomness.
The recent window is the last two signal records; only the commitment gate
looks at the whole history.

Testing: Table tests over (count, signals) -> category.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from ..models import ArcState, Category, SignalRecord


PHASE_CATEGORIES: dict[int, tuple[Category, ...]] = {
    1: (Category.GROUNDING,),
    2: (
        Category.EMOTION,
        Category.PERSPECTIVE,
        Category.CLARITY,
        Category.GROUNDING,
    ),
    3: tuple(Category),
}


@dataclass(frozen=True)
class ArcDecision:
    category: Category
    reason: str


def phase_of(question_count: int) -> int:
    if question_count <= 1:
        return 1
    if question_count == 2:
        return 2
    return 3


def allowed_categories(question_count: int) -> tuple[Category, ...]:
    return PHASE_CATEGORIES[phase_of(question_count)]


def _seen(signals: Sequence[SignalRecord], flag: str) -> bool:
    return any(getattr(s, flag) for s in signals)


def commitment_allowed(state: ArcState) -> bool:
    """
    One-way gate: once escalation appears anywhere in the session, commitment
    stays closed for good. A recent blindspot closes it temporarily.
    """
    return (
        state.question_count >= 3
        and not _seen(state.signals, "emotional_escalation")
        and not _seen(state.recent_signals, "self_other_blindspot")
    )


def decide(state: ArcState) -> ArcDecision:
    count = state.question_count
    recent = state.recent_signals
    phase = phase_of(count)

    if phase == 1:
        return ArcDecision(Category.GROUNDING, "Q1: grounding phase (hard constraint)")

    if phase == 2:
        if _seen(recent, "emotional_escalation"):
            return ArcDecision(Category.EMOTION, "Q2: emotional escalation detected")
        if _seen(recent, "self_other_blindspot"):
            return ArcDecision(Category.PERSPECTIVE, "Q2: self-focused pattern")
        if _seen(recent, "avoidance"):
            return ArcDecision(Category.CLARITY, "Q2: avoidance detected")
        return ArcDecision(Category.PERSPECTIVE, "Q2: default perspective")

    if _seen(recent, "emotional_escalation"):
        return ArcDecision(Category.EMOTION, f"Q{count}: emotional escalation")
    if _seen(recent, "avoidance"):
        return ArcDecision(Category.CLARITY, f"Q{count}: avoidance pattern")
    if _seen(recent, "self_other_blindspot"):
        return ArcDecision(Category.PERSPECTIVE, f"Q{count}: self-focused")
    if _seen(recent, "premature_decision"):
        return ArcDecision(Category.GROUNDING, f"Q{count}: rushing to decide")
    if commitment_allowed(state) and _seen(recent, "clarity_increasing"):
        return ArcDecision(
            Category.COMMITMENT, f"Q{count}: clarity -> commitment (gated)"
        )
    return ArcDecision(Category.PERSPECTIVE, f"Q{count}: default perspective")


def select_category(state: ArcState) -> Category:
    return decide(state).category
