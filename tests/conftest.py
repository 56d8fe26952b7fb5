"""
Discern test configuration - shared fakes and fixtures.

No network: the detector is either a FakeClassifier or an LLMSignalClassifier
over a FakeLLM. Randomness is scripted so exact questions can be asserted.
"""
import random

import pytest

from discern.controller import ReflectionSessionController
from discern.models import SignalRecord
from discern.persistence.session_store import InMemorySessionStore
from discern.services.question_selector import QuestionSelector


class ScriptedRandom(random.Random):
    """choice() returns seq[i] for the next scripted i (0 once the script runs out)."""

    def __init__(self, *, indices=()):
        super().__init__()
        self.indices = list(indices)
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        idx = self.indices.pop(0) if self.indices else 0
        return seq[idx % len(seq)]


class CountingRandom(random.Random):
    def __init__(self, seed=0):
        super().__init__(seed)
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        return super().choice(seq)


class FakeClassifier:
    """Returns scripted records in order, then all-false."""

    def __init__(self, records=()):
        self.records = list(records)
        self.calls = []

    def classify(self, answers, *, situation=None, usage=None):
        self.calls.append((list(answers), situation))
        return self.records.pop(0) if self.records else SignalRecord.none()


class FakeLLM:
    """Scripted LLMClient: each reply is a string or an exception to raise."""

    def __init__(self, replies=()):
        self.replies = list(replies)
        self.calls = []

    def chat(self, messages, settings, system=None):
        self.calls.append({"messages": messages, "settings": settings})
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply, {"model": settings.model, "tokens_in": 120, "tokens_out": 40}


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def signals(**flags):
    return SignalRecord(**flags)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(ttl_seconds=60, clock=clock)


@pytest.fixture
def make_controller(store):
    """Build a controller over the shared store with a scripted selector."""

    def _make(classifier=None, indices=()):
        return ReflectionSessionController(
            classifier or FakeClassifier(),
            store=store,
            selector=QuestionSelector(ScriptedRandom(indices=indices)),
        )

    return _make
