"""
Purpose: The single orchestration point for reflection sessions.
It centralizes "one question cycle" logic and session lifecycle
(begin_moment, begin_custom, advance). Prevents UI/API layers from knowing
how the detector, the arc engine or the store work.

Key responsibilities:
- Create sessions (moment or custom pathway) with the fixed grounding opener.
- Run one cycle per answer: guard input, append answer, classify the whole
  history, append the signal, select the next question, append and count.
- Short-circuit to {"complete": True} once the arc is finished.
- Hold the session's store lock for the whole cycle.
- Track token usage of the detector calls.

Testing: Pure unit tests with fakes: fake SignalClassifier, seeded or
scripted Random for the selector, in-memory store.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from .catalog import FIRST_QUESTION, get_moment
from .errors import SessionNotFoundError
from .interfaces import SecurityGuard, SessionStore, SignalClassifier
from .models import Pathway, Session
from .persistence.session_store import InMemorySessionStore
from .services.pricing import UsageMeter
from .services.question_selector import QuestionSelector
from .services.security import DefaultSecurity

logger = logging.getLogger(__name__)


def _preview(text: str, n: int = 60) -> str:
    text = (text or "").replace("\n", " ")
    return text if len(text) <= n else text[:n] + "..."


class ReflectionSessionController:
    def __init__(
        self,
        classifier: SignalClassifier,
        *,
        store: Optional[SessionStore] = None,
        selector: Optional[QuestionSelector] = None,
        security: Optional[SecurityGuard] = None,
    ):
        self.classifier: SignalClassifier = classifier
        self.store: SessionStore = store if store is not None else InMemorySessionStore()
        self.selector = selector or QuestionSelector()
        self.security: SecurityGuard = security or DefaultSecurity()

        self.meter = UsageMeter()

    def begin_moment(self, session_id: str, moment_id: Union[int, str]) -> dict:
        """Start (or restart) a session on one of the predefined moments."""
        moment = get_moment(moment_id)

        session = Session(
            session_id=str(session_id),
            pathway=Pathway.MOMENT,
            moment_id=moment.id,
            question_history=[FIRST_QUESTION],
        )
        self.store.put(session)
        logger.info("Starting session %s - %s", session_id, moment.title)

        return {
            "pathway": Pathway.MOMENT.value,
            "momentTitle": moment.title,
            "framing": moment.framing,
            "firstQuestion": FIRST_QUESTION,
        }

    def begin_custom(self, session_id: str, situation: str) -> dict:
        """
        Start a session on a situation the user describes in their own words.
        The opener is the same grounding question; the situation only gives
        the detector context.
        """
        self.security.validate_user_input(situation)
        situation = self.security.sanitize_for_prompt(situation)

        session = Session(
            session_id=str(session_id),
            pathway=Pathway.CUSTOM,
            situation=situation,
            question_history=[FIRST_QUESTION],
        )
        self.store.put(session)
        logger.info("Starting custom session %s", session_id)

        return {
            "pathway": Pathway.CUSTOM.value,
            "firstQuestion": FIRST_QUESTION,
        }

    def advance(self, session_id: str, answer: str) -> dict:
        """
        Record one answer and return the next question, or {"complete": True}
        once the fifth question has been issued. A completed session is never
        mutated again.
        """
        with self.store.locked(str(session_id)) as session:
            if session is None:
                raise SessionNotFoundError(session_id)

            if session.is_complete:
                logger.info("Session %s complete", session_id)
                return {"complete": True}

            self.security.validate_user_input(answer)
            answer = self.security.sanitize_for_prompt(answer)
            logger.info(
                "Session %s Q%d answered: %r",
                session_id,
                session.question_count,
                _preview(answer),
            )

            session.answers.append(answer)
            redacted = [self.security.redact_pii(a)[0] for a in session.answers]
            situation = session.situation
            if situation:
                situation = self.security.redact_pii(situation)[0]

            signals = self.classifier.classify(
                redacted, situation=situation, usage=self.meter
            )
            session.signals.append(signals)
            logger.info("Session %s signals: %s", session_id, signals.to_dict())

            selection = self.selector.select(session.snapshot())
            logger.info(
                "Session %s next %r (%s, %s, %d draw(s))",
                session_id,
                _preview(selection.question, 50),
                selection.category.value,
                selection.reason,
                selection.attempts,
            )

            session.record_question(selection.question)

            return {
                "complete": False,
                "nextQuestion": selection.question,
                "questionNumber": session.question_count,
            }

    def usage(self) -> dict:
        """Token counters plus an estimated USD cost for the detector calls so far."""
        return self.meter.as_dict()

    def reset_usage(self) -> None:
        self.meter.reset()
