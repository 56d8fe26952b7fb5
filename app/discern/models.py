"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- Category / Pathway enums.
- SignalRecord (the five classificatory flags for one point in a session).
- Session (mutable, owned by the session store) and ArcState (its frozen
  snapshot, the only thing the arc engine reads).
- Moment, LLMSettings, Price.

Testing: Trivial; mostly types. SignalRecord.from_payload carries the
validation of classifier output.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional
from enum import Enum
from datetime import datetime, timezone


TERMINAL_QUESTION_COUNT = 5


class Category(str, Enum):
    GROUNDING = "grounding"
    PERSPECTIVE = "perspective"
    EMOTION = "emotion"
    CLARITY = "clarity"
    COMMITMENT = "commitment"


class Pathway(str, Enum):
    MOMENT = "moment"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SignalRecord:
    emotional_escalation: bool = False
    avoidance: bool = False
    clarity_increasing: bool = False
    self_other_blindspot: bool = False
    premature_decision: bool = False

    @classmethod
    def none(cls) -> "SignalRecord":
        """All flags false; the fail-safe record."""
        return cls()

    @classmethod
    def keys(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_payload(cls, payload: Any) -> "SignalRecord":
        """
        Build a record from parsed classifier output.
        All five keys must be present with real booleans; extra keys are ignored.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Signal payload must be an object, got {type(payload)!r}")

        values = {}
        for key in cls.keys():
            if key not in payload:
                raise ValueError(f"Signal payload is missing {key!r}")
            value = payload[key]
            if not isinstance(value, bool):
                raise ValueError(f"Signal {key!r} is not a boolean: {value!r}")
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, bool]:
        return {key: getattr(self, key) for key in self.keys()}


@dataclass(frozen=True)
class Moment:
    id: int
    title: str
    framing: str


@dataclass(frozen=True)
class ArcState:
    question_count: int
    signals: tuple[SignalRecord, ...] = ()
    question_history: tuple[str, ...] = ()

    @property
    def recent_signals(self) -> tuple[SignalRecord, ...]:
        return self.signals[-2:]


@dataclass
class Session:
    session_id: str
    pathway: Pathway
    moment_id: Optional[int] = None
    situation: Optional[str] = None

    answers: list[str] = field(default_factory=list)
    signals: list[SignalRecord] = field(default_factory=list)
    question_history: list[str] = field(default_factory=list)
    question_count: int = 1

    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_complete(self) -> bool:
        return self.question_count >= TERMINAL_QUESTION_COUNT

    def snapshot(self) -> ArcState:
        return ArcState(
            question_count=self.question_count,
            signals=tuple(self.signals),
            question_history=tuple(self.question_history),
        )

    def record_question(self, question: str) -> None:
        """Append the issued question and move to the next position."""
        self.question_history.append(question)
        self.question_count += 1


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 512
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    response_format: Optional[dict] = None


@dataclass(frozen=True)
class Price:
    input_per_1M: float
    output_per_1M: float
