"""
Static content: the moment catalog and the question bank.

Both tables are read-only for the process lifetime. The selection logic only
reads QUESTION_BANK; MOMENTS enriches response payloads.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Mapping, Union

from .errors import MomentNotFoundError
from .models import Category, Moment


FIRST_QUESTION = "What specifically is happening in this situation?"


MOMENTS: Mapping[int, Moment] = MappingProxyType(
    {
        1: Moment(
            id=1,
            title="Having a difficult conversation",
            framing=(
                "This moment is about thinking clearly before you say something "
                "that matters. These conversations rarely feel easy. Often the "
                "instinct is to rehearse lines or try to fix the other person, "
                "when what may work best is getting yourself into the right state "
                "so the conversation has a chance to go well."
            ),
        ),
        2: Moment(
            id=2,
            title="When everything feels urgent",
            framing=(
                "This moment is about restoring perspective when everything feels "
                "important and time feels compressed. The pressure is real. Often "
                "the instinct is to do more faster, when what may work best is "
                "deciding what actually deserves your attention right now."
            ),
        ),
        3: Moment(
            id=3,
            title="I need to say no to someone",
            framing=(
                "This moment is about setting a boundary without damaging the "
                "relationship. Saying no often feels harder than it should. Often "
                "the instinct is to be harsh or over-explain, when what may work "
                "best is getting clear on what's fair."
            ),
        ),
        4: Moment(
            id=4,
            title="Someone's upset with me",
            framing=(
                "This moment is about responding to someone's upset without "
                "becoming defensive or dismissive. It can feel uncomfortable when "
                "someone's angry with you. Often the instinct is to prove you're "
                "right or fix their feelings, when what may work best is getting "
                "clear enough to show up well."
            ),
        ),
        5: Moment(
            id=5,
            title="I made a mistake",
            framing=(
                "This moment is about owning a mistake clearly without spiralling "
                "into shame or defensiveness. Mistakes rarely feel easy to face. "
                "Often the instinct is to hide or over-apologise, when what may "
                "work best is getting clear on what happened so you can repair it "
                "well."
            ),
        ),
    }
)


QUESTION_BANK: Mapping[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.GROUNDING: (
            FIRST_QUESTION,
            "What are the facts of the situation — separate from your interpretation?",
            "What is within your control right now?",
            "What outcome actually matters most here?",
        ),
        Category.PERSPECTIVE: (
            "What might the other person be experiencing in this situation?",
            "What assumptions could you be making about their intent?",
            "How might this look from their perspective?",
            "What might you be missing about what matters to them?",
        ),
        Category.EMOTION: (
            "What emotions are present for you right now?",
            "Which emotion is most influencing how you're thinking?",
            "What emotion might come up for you that could throw you off if "
            "you're not careful?",
            "What's coming up for you as you think about this?",
        ),
        Category.CLARITY: (
            "What feels unresolved at this point?",
            "What are you avoiding looking at directly?",
            "What specifically needs to be said that you're currently softening?",
            "What would clarity look like here?",
        ),
        Category.COMMITMENT: (
            "What really matters most in this situation — for both of you?",
            "What's your next step?",
            "What are you ready to do?",
            "What would owning this well look like?",
        ),
    }
)


def get_moment(moment_id: Union[int, str]) -> Moment:
    """Look up a moment by id; digit strings are accepted (JSON clients send both)."""
    if isinstance(moment_id, int) and not isinstance(moment_id, bool):
        key = moment_id
    elif isinstance(moment_id, str) and moment_id.isdecimal():
        key = int(moment_id)
    else:
        raise MomentNotFoundError(moment_id)

    moment = MOMENTS.get(key)
    if moment is None:
        raise MomentNotFoundError(moment_id)
    return moment


def questions_for(category: Category) -> tuple[str, ...]:
    return QUESTION_BANK[Category(category)]
