"""
Abstractions for pluggable services. Inversion of control: the controller
depends on interfaces, not concrete services. Enables fakes and future swaps.
Protocols define what services or components can do,
without saying how they do it.

Common protocols:
- LLMClient.chat(messages, settings) -> (reply, meta)
- SignalClassifier.classify(answers, usage=sink) -> SignalRecord
- UsageSink.add(meta) receives token usage of one LLM call
- SessionStore.get/put/remove/locked(session_id)
- PromptFactory.build_signal_system() / signal_instruction(...)
- SecurityGuard.validate_user_input(text) / sanitize_for_prompt / redact_pii

Testing: Use simple fake implementations to test the controller without network calls.
"""

from __future__ import annotations
from typing import ContextManager, Optional, Protocol, Sequence
from .models import LLMSettings, Session, SignalRecord


class LLMClient(Protocol):
    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]: ...


class UsageSink(Protocol):
    def add(self, meta: Optional[dict]) -> None: ...


class SignalClassifier(Protocol):
    def classify(
        self,
        answers: Sequence[str],
        *,
        situation: Optional[str] = None,
        usage: Optional[UsageSink] = None,
    ) -> SignalRecord: ...


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[Session]: ...

    def put(self, session: Session) -> None: ...

    def remove(self, session_id: str) -> Optional[Session]: ...

    def locked(self, session_id: str) -> ContextManager[Optional[Session]]: ...

    def __len__(self) -> int: ...


class PromptFactory(Protocol):
    def build_signal_system(self) -> str: ...

    def signal_instruction(
        self, *, answers: Sequence[str], situation: Optional[str] = None
    ) -> str: ...

    def assemble(self, *, system: str, user_text: str) -> list[dict[str, str]]: ...


class SecurityGuard(Protocol):
    def validate_user_input(self, text: str) -> None: ...

    def sanitize_for_prompt(self, text: str) -> str: ...

    def redact_pii(self, text: str) -> tuple[str, list[str]]: ...
