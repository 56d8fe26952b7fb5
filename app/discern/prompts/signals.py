"""Signal-detection prompts (strictly classificatory, never shown to the user)."""

from __future__ import annotations
from textwrap import dedent
from typing import Optional, Sequence

from ..models import SignalRecord
from .common import render_answers, situation_block


def build_signal_system() -> str:
    return dedent(
        """\
        You are a pattern detector. Your role is strictly classificatory.

        CRITICAL CONSTRAINTS:
        - Detect ONLY surface patterns in language
        - Do NOT infer personality traits, capabilities, motives, intent, or psychological states
        - Do NOT explain, summarise, advise, or characterise the user
        - Return ONLY boolean flags in JSON format
        - Your output must NEVER be shown to the user
        """
    )


def signal_instruction(
    *, answers: Sequence[str], situation: Optional[str] = None
) -> str:
    shape = "{\n" + ",\n".join(
        f'  "{key}": true/false' for key in SignalRecord.keys()
    ) + "\n}"
    return dedent(
        """\
        {situation}Here are the user's responses:

        {answers}

        Detect surface-level language patterns only:

        - emotional_escalation: Are emotion words increasing in frequency or intensity across responses?
        - avoidance: Are responses consistently vague or indirect when asked direct questions?
        - clarity_increasing: Are responses becoming more specific and concrete over time?
        - self_other_blindspot: Do responses only mention the user's perspective (no mention of others)?
        - premature_decision: Do responses include action statements before sufficient exploration?

        Return ONLY this JSON structure with no additional text:
        """
    ).format(
        situation=situation_block(situation),
        answers=render_answers(answers),
    ) + shape
