"""
UI layer
Purpose: Streamlit-only glue. Renders widgets, collects answers, and delegates
all work to the controller. Keeps UI concerns (layout/state widgets) separate from
dialogue logic so that logic can be unit tested without Streamlit.
"""

import streamlit as st
from datetime import datetime
import uuid

from discern.catalog import MOMENTS
from discern.config import Settings
from discern.controller import ReflectionSessionController
from discern.errors import DiscernError
from discern.logging_config import configure_logging
from discern.models import TERMINAL_QUESTION_COUNT
from discern.persistence.session_store import InMemorySessionStore
from discern.services.llm_openai import OpenAILLMClient
from discern.services.pricing import PRICE_TABLE
from discern.services.signal_classifier import (
    LLMSignalClassifier,
    default_signal_settings,
)


settings = Settings.from_env()
configure_logging(settings.log_level)

# ---------------------------
# Page config
# ---------------------------
st.set_page_config(
    page_title="Discern",
    page_icon="🧭",
    layout="centered",
    initial_sidebar_state="expanded",
)

# ---------------------------
# UI constants
# ---------------------------
MOMENT_LABELS = {m.title: m.id for m in MOMENTS.values()}
CUSTOM_LABEL = "Something else (describe it)"

# ---------------------------
# Session state init
# ---------------------------
st_session = st.session_state
st_session.setdefault("controller", None)
st_session.setdefault("api_key_set", False)
st_session.setdefault("model", settings.model if settings.model in PRICE_TABLE else "gpt-4o-mini")
st_session.setdefault("session_id", None)
st_session.setdefault("framing", "")
st_session.setdefault("moment_title", "")
st_session.setdefault("transcript", [])
st_session.setdefault("current_question", None)
st_session.setdefault("question_number", 0)
st_session.setdefault("complete", False)
st_session.setdefault("session_start_ts", datetime.now().timestamp())


# ---------------------------
# Helpers
# ---------------------------
def get_controller():
    """Return the controller object."""
    return st_session.get("controller")


def build_controller(api_key: str, model: str) -> ReflectionSessionController:
    llm = OpenAILLMClient(api_key=api_key)
    llm.ping()
    classifier = LLMSignalClassifier(llm, default_signal_settings(model))
    store = InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    return ReflectionSessionController(classifier, store=store)


def reset_session():
    """Forget the current dialogue; keep the API key and model choice."""
    controller = get_controller()
    if controller and st_session.session_id:
        controller.store.remove(st_session.session_id)
    st_session.session_id = None
    st_session.framing = ""
    st_session.moment_title = ""
    st_session.transcript = []
    st_session.current_question = None
    st_session.question_number = 0
    st_session.complete = False
    st_session.session_start_ts = datetime.now().timestamp()


def open_session(payload: dict, session_id: str, title: str):
    st_session.session_id = session_id
    st_session.moment_title = title
    st_session.framing = payload.get("framing", "")
    st_session.current_question = payload["firstQuestion"]
    st_session.question_number = 1
    st_session.transcript = []
    st_session.complete = False
    st_session.session_start_ts = datetime.now().timestamp()


def start_moment(label: str):
    controller = get_controller()
    session_id = str(uuid.uuid4())
    payload = controller.begin_moment(session_id, MOMENT_LABELS[label])
    open_session(payload, session_id, payload["momentTitle"])


def start_custom(situation: str):
    controller = get_controller()
    session_id = str(uuid.uuid4())
    payload = controller.begin_custom(session_id, situation)
    open_session(payload, session_id, "Your situation")


def submit_answer(answer: str):
    controller = get_controller()
    result = controller.advance(st_session.session_id, answer)
    st_session.transcript.append((st_session.current_question, answer))
    if result.get("complete"):
        st_session.complete = True
        st_session.current_question = None
        return
    st_session.current_question = result["nextQuestion"]
    st_session.question_number = result["questionNumber"]


def format_duration(seconds: float) -> str:
    """Format seconds as Mm Ss."""
    seconds = int(max(0, seconds))
    return f"{seconds // 60}m {seconds % 60:02d}s"


# ---------------------------
# SIDEBAR: settings & usage
# ---------------------------
with st.sidebar:
    st.markdown("# Settings")

    st.markdown("## OpenAI API Key Required")
    user_api_key = st.text_input(
        "Enter your API key",
        type="password",
        value=settings.openai_api_key or "",
        help="We do not store your key. It stays in your session only.",
    )
    st_session.model = st.selectbox(
        "Model",
        list(PRICE_TABLE.keys()),
        index=list(PRICE_TABLE.keys()).index(st_session.model),
        disabled=st_session.api_key_set,
    )
    if not user_api_key:
        st.warning("Please enter your API key in the sidebar to continue.")
        st.stop()
    elif not st_session.api_key_set:
        try:
            st_session.controller = build_controller(user_api_key, st_session.model)
            st_session.api_key_set = True
        except Exception as e:
            st_session.controller = None
            st.error(f"OpenAI client init failed: {e}")
            st.stop()

    st.divider()
    usage = get_controller().usage()
    st.caption(
        f"Tokens in/out: {usage['tokens_in']} / {usage['tokens_out']} · "
        f"est. ${usage['cost_usd']:.4f}"
    )
    if st_session.session_id:
        st.caption(
            "Session time: "
            + format_duration(datetime.now().timestamp() - st_session.session_start_ts)
        )
    st.button("Start over", type="primary", on_click=reset_session)


# ---------------------------
# MAIN
# ---------------------------
st.title("Discern")

if not st_session.session_id:
    st.markdown("Pick the moment you are in. Five questions, one at a time.")
    choice = st.radio("Moment", list(MOMENT_LABELS) + [CUSTOM_LABEL])
    situation = ""
    if choice == CUSTOM_LABEL:
        situation = st.text_area("What's going on?", height=140)
    if st.button("Begin", type="primary"):
        try:
            if choice == CUSTOM_LABEL:
                start_custom(situation)
            else:
                start_moment(choice)
            st.rerun()
        except DiscernError as e:
            st.error(e.message)
    st.stop()

st.subheader(st_session.moment_title)
if st_session.framing:
    st.info(st_session.framing)

for question, answer in st_session.transcript:
    with st.chat_message("assistant"):
        st.markdown(question)
    with st.chat_message("user"):
        st.markdown(answer)

if st_session.complete:
    st.success("That's the arc. Take a moment with what you've written.")
    st.stop()

with st.chat_message("assistant"):
    st.caption(f"Question {st_session.question_number} of {TERMINAL_QUESTION_COUNT}")
    st.markdown(st_session.current_question)

raw = st.chat_input("Type your answer…")
if raw:
    try:
        with st.spinner("Thinking…"):
            submit_answer(raw)
        st.rerun()
    except DiscernError as e:
        st.error(e.message)
