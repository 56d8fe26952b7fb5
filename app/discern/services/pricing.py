"""
Purpose: Token math & cost estimation for detector calls.
Central pricing logic so UI/controller do not duplicate calculations.
"""

import threading
from typing import Optional

from ..models import Price


PRICE_TABLE = {
    "gpt-4o-mini": Price(0.15, 0.60),
    "gpt-4.1-mini": Price(0.40, 1.60),
    "gpt-4o": Price(2.50, 10.00),
    "gpt-5-mini": Price(0.25, 2.00),
}


def estimate_cost(model: str, tokens_in: int, tokens_out: int) -> float:
    p = PRICE_TABLE.get(model, Price(0.0, 0.0))
    return (tokens_in / 1000000) * p.input_per_1M + (
        tokens_out / 1000000
    ) * p.output_per_1M


class UsageMeter:
    """Running token totals across LLM calls; unknown models cost 0. Thread-safe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.tokens_in: int = 0
        self.tokens_out: int = 0
        self.model_used: Optional[str] = None

    def add(self, meta: Optional[dict]) -> None:
        if not meta:
            return
        with self._lock:
            self.tokens_in += int(meta.get("tokens_in", 0))
            self.tokens_out += int(meta.get("tokens_out", 0))
            self.model_used = meta.get("model") or self.model_used

    def reset(self) -> None:
        with self._lock:
            self.tokens_in = self.tokens_out = 0
            self.model_used = None

    def as_dict(self) -> dict:
        with self._lock:
            tokens_in, tokens_out, model = (
                self.tokens_in,
                self.tokens_out,
                self.model_used,
            )
        return {
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "model": model,
            "cost_usd": estimate_cost(model or "", tokens_in, tokens_out),
        }
