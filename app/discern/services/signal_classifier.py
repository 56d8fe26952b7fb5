"""
Purpose: Classify the answer history into a SignalRecord.
The classifier is strictly classificatory: surface lexical/structural patterns
only, never personality, motive or psychological-state inference. Its output
steers question selection and is never shown to the user.

Contract:
- Input is the whole ordered answer history, not just the latest answer.
- Output always has the five flags.
- Any failure (SDK error, empty reply, malformed JSON, wrong shape) yields
  SignalRecord.none(). Nothing propagates; the dialogue always continues.

Testing: Fake LLMClient returning canned text or raising.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

from ..interfaces import LLMClient, PromptFactory, UsageSink
from ..models import LLMSettings, SignalRecord
from ..prompts import DefaultPromptFactory
from ..utils.llm_json import require_object

logger = logging.getLogger(__name__)

DEFAULT_SIGNAL_MODEL = "gpt-4o-mini"


def default_signal_settings(model: str = DEFAULT_SIGNAL_MODEL) -> LLMSettings:
    return LLMSettings(model=model, temperature=0.0, top_p=1.0, max_tokens=200)


def parse_signals(text: str) -> SignalRecord:
    """Strict parse of a detector reply; raises ValueError on any shape problem."""
    obj = require_object(text, err="Signal detector did not return a JSON object.")
    return SignalRecord.from_payload(obj)


class LLMSignalClassifier:
    def __init__(
        self,
        llm: LLMClient,
        settings: Optional[LLMSettings] = None,
        prompts: Optional[PromptFactory] = None,
    ):
        self.llm = llm
        self.settings = settings or default_signal_settings()
        self.prompts = prompts or DefaultPromptFactory()

    def classify(
        self,
        answers: Sequence[str],
        *,
        situation: Optional[str] = None,
        usage: Optional[UsageSink] = None,
    ) -> SignalRecord:
        """Token usage of a completed LLM call is added to `usage`."""
        try:
            messages = self.prompts.assemble(
                system=self.prompts.build_signal_system(),
                user_text=self.prompts.signal_instruction(
                    answers=list(answers), situation=situation
                ),
            )
            text, meta = self.llm.chat(messages, self.settings)
            if usage is not None:
                usage.add(
                    {
                        "model": meta.get("model", self.settings.model),
                        "tokens_in": int(meta.get("tokens_in", 0)),
                        "tokens_out": int(meta.get("tokens_out", 0)),
                    }
                )
            return parse_signals(text)
        except Exception as e:
            logger.warning("Signal detection failed, using no-signal fallback: %r", e)
            return SignalRecord.none()
