"""Facade over the prompt modules; the controller and services only see DefaultPromptFactory."""

from __future__ import annotations
from typing import Optional, Sequence

from . import signals as _signals
from .common import assemble as _assemble


class DefaultPromptFactory:
    # SIGNAL DETECTION
    def build_signal_system(self) -> str:
        return _signals.build_signal_system()

    def signal_instruction(
        self, *, answers: Sequence[str], situation: Optional[str] = None
    ) -> str:
        return _signals.signal_instruction(answers=answers, situation=situation)

    def assemble(self, *, system: str, user_text: str) -> list[dict[str, str]]:
        return _assemble(system=system, user_text=user_text)
