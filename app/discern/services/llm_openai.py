"""
Purpose: Thin client wrapper around OpenAI (or other LLMs later).
One place for auth, retries, model options, response/usage normalization.

Extensibility:
- Add other providers (AnthropicLLM, LocalLLM) without touching the classifier.

Testing: Mock SDK calls; assert it maps usage and errors correctly.
"""

from __future__ import annotations
import logging
import time
from typing import Optional

from openai import OpenAI
from openai import APIConnectionError, APITimeoutError, InternalServerError, RateLimitError

from ..models import LLMSettings

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (RateLimitError, APITimeoutError, APIConnectionError, InternalServerError)
RETRY_DELAYS = (0.5, 1.0, 2.0, 4.0)


class OpenAILLMClient:
    def __init__(self, api_key: str, *, client: Optional[OpenAI] = None):
        self.api_key = api_key
        if not self.api_key:
            raise RuntimeError("Missing OPENAI_API_KEY")
        self.client = client or OpenAI(api_key=self.api_key)
        self.sleep = time.sleep

    def _with_retries(self, fn, *args, **kwargs):
        for delay in RETRY_DELAYS:
            try:
                return fn(*args, **kwargs)
            except RETRYABLE_ERRORS as e:
                logger.warning("LLM call failed (%s); retrying in %.1fs", e, delay)
                self.sleep(delay)
        return fn(*args, **kwargs)

    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]:
        payload = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend(messages)

        extra = {}
        if settings.response_format:
            extra["response_format"] = settings.response_format

        def call_cc():
            return self.client.chat.completions.create(
                model=settings.model,
                messages=payload,
                temperature=settings.temperature,
                top_p=settings.top_p,
                max_tokens=settings.max_tokens,
                frequency_penalty=settings.frequency_penalty,
                presence_penalty=settings.presence_penalty,
                **extra,
            )

        cc = self._with_retries(call_cc)
        text = cc.choices[0].message.content or ""
        usage = getattr(cc, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) if usage else 0
        tokens_out = getattr(usage, "completion_tokens", 0) if usage else 0
        return text, {
            "model": cc.model,
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "raw": cc,
        }

    def ping(self) -> None:
        """Cheap authenticated call used by the UI to validate a key."""
        self.client.models.list()
