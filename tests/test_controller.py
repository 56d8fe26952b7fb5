"""
Controller tests: full question cycles over fakes.

The scripted Random makes every draw predictable; indices are noted next to
each scenario.
"""
import threading

import pytest

from discern.catalog import FIRST_QUESTION, QUESTION_BANK
from discern.errors import InvalidInputError, MomentNotFoundError, SessionNotFoundError
from discern.models import Category, SignalRecord
from discern.services.pricing import estimate_cost
from discern.services.signal_classifier import LLMSignalClassifier

from conftest import FakeClassifier, FakeLLM, signals

G = QUESTION_BANK[Category.GROUNDING]
P = QUESTION_BANK[Category.PERSPECTIVE]
E = QUESTION_BANK[Category.EMOTION]
C = QUESTION_BANK[Category.COMMITMENT]


class TestBegin:
    def test_begin_moment_payload(self, make_controller, store):
        controller = make_controller()

        payload = controller.begin_moment("s1", 5)

        assert payload == {
            "pathway": "moment",
            "momentTitle": "I made a mistake",
            "framing": payload["framing"],
            "firstQuestion": FIRST_QUESTION,
        }
        assert payload["framing"].startswith("This moment is about owning a mistake")
        session = store.get("s1")
        assert session.question_count == 1
        assert session.question_history == [FIRST_QUESTION]
        assert session.moment_id == 5

    def test_unknown_moment_creates_nothing(self, make_controller, store):
        controller = make_controller()
        with pytest.raises(MomentNotFoundError):
            controller.begin_moment("s1", 42)
        assert store.get("s1") is None

    def test_begin_custom(self, make_controller, store):
        controller = make_controller()

        payload = controller.begin_custom("c1", "  My co-founder wants to pivot.  ")

        assert payload == {"pathway": "custom", "firstQuestion": FIRST_QUESTION}
        assert store.get("c1").situation == "My co-founder wants to pivot."

    def test_begin_custom_rejects_empty(self, make_controller, store):
        with pytest.raises(InvalidInputError):
            make_controller().begin_custom("c1", "   ")
        assert store.get("c1") is None

    def test_restart_replaces_session(self, make_controller, store):
        controller = make_controller(indices=[1])
        controller.begin_moment("s1", 1)
        controller.advance("s1", "something")

        controller.begin_moment("s1", 2)

        session = store.get("s1")
        assert session.question_count == 1
        assert session.answers == []


class TestArc:
    def test_all_false_arc(self, make_controller, store):
        # draws: G[1] (phase 1), P[0] (phase 2 default), P[1], P[2] (phase 3 default)
        controller = make_controller(indices=[1, 0, 1, 2])
        controller.begin_moment("s1", 5)

        results = [controller.advance("s1", "I told him") for _ in range(4)]

        assert [r["nextQuestion"] for r in results] == [G[1], P[0], P[1], P[2]]
        assert [r["questionNumber"] for r in results] == [2, 3, 4, 5]
        assert all(r["complete"] is False for r in results)

        session = store.get("s1")
        assert session.question_count == 5
        assert len(session.question_history) == 5
        assert len(session.answers) == len(session.signals) == 4

    def test_complete_after_fifth_question_without_mutation(self, make_controller, store):
        classifier = FakeClassifier()
        controller = make_controller(classifier, indices=[1, 0, 1, 2])
        controller.begin_moment("s1", 5)
        for _ in range(4):
            controller.advance("s1", "I told him")

        assert controller.advance("s1", "fifth answer") == {"complete": True}
        assert controller.advance("s1", "sixth answer") == {"complete": True}

        session = store.get("s1")
        assert session.question_count == 5
        assert len(session.answers) == 4
        assert len(session.signals) == 4
        assert len(classifier.calls) == 4

    def test_classifier_sees_whole_history(self, make_controller):
        classifier = FakeClassifier()
        controller = make_controller(classifier, indices=[1, 0])
        controller.begin_moment("s1", 1)

        controller.advance("s1", "one")
        controller.advance("s1", "two")

        assert classifier.calls[0] == (["one"], None)
        assert classifier.calls[1] == (["one", "two"], None)

    def test_escalation_on_cycle_two_bars_commitment(self, make_controller):
        records = [
            SignalRecord.none(),
            signals(emotional_escalation=True),
            signals(clarity_increasing=True),
            signals(clarity_increasing=True),
        ]
        # draws: G[1], E[0], E[1], P[0]
        controller = make_controller(FakeClassifier(records), indices=[1, 0, 1, 0])
        controller.begin_moment("s1", 4)

        questions = [controller.advance("s1", f"answer {i}")["nextQuestion"] for i in range(4)]

        assert questions[1] == E[0]
        assert questions[2] == E[1]
        assert questions[3] == P[0]
        assert not set(questions) & set(C)

    def test_rising_clarity_opens_commitment(self, make_controller):
        records = [
            SignalRecord.none(),
            SignalRecord.none(),
            signals(clarity_increasing=True),
        ]
        controller = make_controller(FakeClassifier(records), indices=[1, 0, 0])
        controller.begin_moment("s1", 3)

        questions = [controller.advance("s1", "clear")["nextQuestion"] for _ in range(3)]

        assert questions == [G[1], P[0], C[0]]

    def test_classifier_fault_falls_back_to_defaults(self, make_controller, store):
        llm = FakeLLM([ConnectionError("down"), "garbage", ConnectionError("down"), "{}"])
        controller = make_controller(LLMSignalClassifier(llm), indices=[1, 0, 1, 2])
        controller.begin_moment("s1", 5)

        questions = [controller.advance("s1", "I told him")["nextQuestion"] for _ in range(4)]

        assert questions == [G[1], P[0], P[1], P[2]]
        assert store.get("s1").signals == [SignalRecord.none()] * 4


class TestErrors:
    def test_unknown_session(self, make_controller):
        with pytest.raises(SessionNotFoundError) as exc:
            make_controller().advance("nope", "hello")
        assert exc.value.code == "SESSION_NOT_FOUND"

    def test_unknown_sessions_leave_no_locks(self, make_controller, store):
        controller = make_controller()
        for i in range(1000):
            with pytest.raises(SessionNotFoundError):
                controller.advance(f"bogus-{i}", "hi")

        assert store._session_locks == {}

    @pytest.mark.parametrize("answer", ["", "   ", "x" * 8001, None])
    def test_invalid_answer_leaves_session_untouched(self, make_controller, store, answer):
        classifier = FakeClassifier()
        controller = make_controller(classifier)
        controller.begin_moment("s1", 1)

        with pytest.raises(InvalidInputError):
            controller.advance("s1", answer)

        session = store.get("s1")
        assert session.answers == []
        assert session.question_count == 1
        assert classifier.calls == []

    def test_expired_session_is_not_found(self, make_controller, clock):
        controller = make_controller()
        controller.begin_moment("s1", 1)
        clock.advance(3600)
        with pytest.raises(SessionNotFoundError):
            controller.advance("s1", "late answer")


class TestPrivacyAndUsage:
    def test_pii_redacted_for_classifier_only(self, make_controller, store):
        classifier = FakeClassifier()
        controller = make_controller(classifier)
        controller.begin_moment("s1", 1)

        controller.advance("s1", "Email me at jo@example.com")

        assert classifier.calls[0][0] == ["Email me at [EMAIL]"]
        assert store.get("s1").answers == ["Email me at jo@example.com"]

    def test_custom_situation_reaches_classifier(self, make_controller):
        classifier = FakeClassifier()
        controller = make_controller(classifier)
        controller.begin_custom("c1", "My team missed a deadline")

        controller.advance("c1", "It happened on Friday")

        assert classifier.calls[0] == (["It happened on Friday"], "My team missed a deadline")

    def test_token_usage_accumulates(self, make_controller):
        llm = FakeLLM(["{}", "{}"])
        controller = make_controller(LLMSignalClassifier(llm), indices=[1, 0])
        controller.begin_moment("s1", 1)

        controller.advance("s1", "a")
        controller.advance("s1", "b")

        usage = controller.usage()
        assert usage["tokens_in"] == 240
        assert usage["tokens_out"] == 80
        assert usage["model"] == "gpt-4o-mini"
        assert usage["cost_usd"] == pytest.approx(estimate_cost("gpt-4o-mini", 240, 80))

        controller.reset_usage()
        assert controller.usage()["tokens_in"] == 0

    def test_concurrent_sessions_count_every_call_once(self, make_controller):
        """Two sessions share one classifier; both calls are in flight together."""
        both_in_flight = threading.Barrier(2, timeout=5)

        class OverlappingLLM:
            def chat(self, messages, settings, system=None):
                both_in_flight.wait()
                return "{}", {"model": settings.model, "tokens_in": 120, "tokens_out": 40}

        controller = make_controller(LLMSignalClassifier(OverlappingLLM()))
        controller.begin_moment("a", 1)
        controller.begin_moment("b", 2)

        threads = [
            threading.Thread(target=controller.advance, args=(sid, "an answer"))
            for sid in ("a", "b")
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        usage = controller.usage()
        assert usage["tokens_in"] == 240
        assert usage["tokens_out"] == 80
