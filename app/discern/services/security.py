"""
Purpose: Guardrails for answers before they reach the session or the detector.
Content: early, predictable failures; prevent oversized requests and keep
PII out of LLM prompts.
"""

import re

from ..errors import InvalidInputError

EMAIL = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.I)
PHONE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
CCARD = re.compile(r"\b(?:\d[ -]*?){13,19}\b")
SSN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

MAX_INPUT_CHARS = 8000


class DefaultSecurity:
    def validate_user_input(self, text) -> None:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Please enter a non-empty answer.")
        if len(text) > MAX_INPUT_CHARS:
            raise InvalidInputError(
                f"Your answer is too long (max {MAX_INPUT_CHARS} characters)."
            )

    def sanitize_for_prompt(self, text: str) -> str:
        return (text or "").replace("\x00", "").strip()

    def redact_pii(self, text: str):
        found = []

        def _redact(rx, label):
            nonlocal text
            if rx.search(text):
                found.append(label)
                text = rx.sub(f"[{label}]", text)

        _redact(EMAIL, "EMAIL")
        _redact(SSN, "SSN")
        _redact(CCARD, "CARD")
        _redact(PHONE, "PHONE")
        return text, found
