"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
from typing import Optional, Sequence


def _clip_text(s: str, max_chars: int) -> str:
    """Clip text to max_chars, adding ellipsis if clipped."""
    if len(s) <= max_chars:
        return s
    return s[: max_chars - 1].rstrip() + "…"


def render_answers(answers: Sequence[str], *, max_chars: int = 2000) -> str:
    """Number the answers the way the detector expects: `Response N: ...`."""
    blocks = [
        f"Response {i}: {_clip_text((a or '').strip(), max_chars)}"
        for i, a in enumerate(answers, start=1)
    ]
    return "\n\n".join(blocks)


def situation_block(situation: Optional[str], *, max_chars: int = 1200) -> str:
    if situation and situation.strip():
        return (
            "Situation the user described (context only, do not classify it):\n"
            f"{_clip_text(situation.strip(), max_chars)}\n\n"
        )
    return ""


def assemble(*, system: str, user_text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user_text},
    ]
