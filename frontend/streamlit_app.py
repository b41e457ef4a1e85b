import sys
import logging
from pathlib import Path

import streamlit as st

# Add the 'backend' directory to the path to allow for local imports
backend_path = Path(__file__).resolve().parent.parent / "backend"
sys.path.append(str(backend_path))

from main import (  # noqa: E402
    analyse_session, generate_for_session, load_app_settings, set_answer, start_session, toggle_uncertain,
)
from services.answer_reconciler import detected_summary, is_editable, is_prefilled  # noqa: E402
from services.question_catalog import MODE_HELP_TEXTS, MODE_PLACEHOLDERS, QUESTIONS, widget_value  # noqa: E402
from utils.doc_ingest import pdf_bytes_to_text  # noqa: E402
from utils.document_generator import document_to_text, docx_bytes  # noqa: E402

# --- Settings ---
app_settings = load_app_settings()

logging.basicConfig(
    level=logging.DEBUG if app_settings.get("enable_debug_logging") else logging.INFO,
    handlers=[logging.StreamHandler(sys.stdout)],
)

MODE_LABELS = {"draft": "I have a draft bid", "notes": "I have rough notes"}

st.set_page_config(page_title="Charity Funding Optimiser", layout="wide")
st.title("Charity Funding Optimiser")

if "step" not in st.session_state:
    st.session_state.step = 1
    st.session_state.funding_session = None


def _go(step: int):
    st.session_state.step = step


def _on_answer(qid: str):
    st.session_state.funding_session = set_answer(
        st.session_state.funding_session, qid, st.session_state[f"q_{qid}"]
    )


def _on_not_sure(qid: str):
    st.session_state.funding_session = toggle_uncertain(st.session_state.funding_session, qid)


def _seed_widgets(fs, overwrite: bool = False):
    """Widget state follows the session answers. Only safe before the widgets are drawn in a run."""
    for q in QUESTIONS:
        if overwrite or f"q_{q.id}" not in st.session_state:
            st.session_state[f"q_{q.id}"] = widget_value(q, fs.answers.get(q.id))
        if overwrite or f"ns_{q.id}" not in st.session_state:
            st.session_state[f"ns_{q.id}"] = q.id in fs.uncertain


def _start_over():
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    st.session_state.step = 1
    st.session_state.funding_session = None


# --- Progress ---
st.caption(" → ".join(
    f"**{label}**" if i == st.session_state.step else label
    for i, label in enumerate(["Input", "Develop & Refine", "Final Output"], start=1)
))


# --- Step 1: input ---
def render_step1():
    default_mode = app_settings.get("default_mode", "draft")
    mode = st.radio(
        "What are you starting from?", options=list(MODE_LABELS),
        format_func=MODE_LABELS.get, index=list(MODE_LABELS).index(default_mode), horizontal=True,
    )
    with st.form("input_form"):
        funder_name = st.text_input("Funder name", placeholder="e.g., National Lottery Community Fund")
        user_input = st.text_area("Your draft or notes", placeholder=MODE_PLACEHOLDERS[mode],
                                  help=MODE_HELP_TEXTS[mode], height=240)
        upload = st.file_uploader("...or upload a PDF draft", type="pdf")
        submitted = st.form_submit_button("Analyse")

    if not submitted:
        return
    if upload is not None and not user_input.strip():
        user_input = pdf_bytes_to_text(upload.getvalue())
    if not funder_name.strip() or not user_input.strip():
        st.warning("Please enter a funder name and some text about your project.")
        return

    with st.spinner("Analysing your input…"):
        outcome = analyse_session(start_session(funder_name, user_input, mode))
    if not outcome.ok:
        st.error(outcome.error)
        return
    st.session_state.funding_session = outcome.session
    st.session_state.reseed_widgets = True
    _go(2)
    st.rerun()


# --- Step 2: develop & refine ---
def _render_question(fs, q):
    disabled = not is_editable(q.id, fs.uncertain)
    label = q.label + ("  `Detected`" if is_prefilled(fs.detected, q.id) else "")
    key = f"q_{q.id}"
    kwargs = dict(key=key, disabled=disabled, help=q.why, on_change=_on_answer, args=(q.id,))

    if q.input_kind == "text":
        st.text_input(label, placeholder=q.placeholder, **kwargs)
    elif q.input_kind == "longtext":
        st.text_area(label, placeholder=q.placeholder, **kwargs)
    elif q.input_kind == "choice-toggle":
        st.radio(label, options=q.options, horizontal=True, **kwargs)
    else:
        st.selectbox(label, options=q.options, placeholder="Select...", **kwargs)

    st.checkbox("Not sure yet", key=f"ns_{q.id}",
                on_change=_on_not_sure, args=(q.id,))


def render_step2():
    fs = st.session_state.funding_session
    _seed_widgets(fs, overwrite=st.session_state.pop("reseed_widgets", False))
    summary = detected_summary(fs.detected, fs.mode)
    left, right = st.columns([2, 1])

    with left:
        st.subheader("What we found")
        st.markdown(f"**Mode:** {summary['mode_line']}")
        if summary["project_types"]:
            st.markdown("**Project type:** " + ", ".join(summary["project_types"]))
        if summary["items"]:
            st.markdown("**Detected from your input:**")
            for item in summary["items"]:
                st.markdown(f"- {item}")
        else:
            st.info(summary["empty_message"])
        if summary["project_summary"]:
            st.markdown(f"**Project summary:** {summary['project_summary']}")
        if summary["strengths"]:
            st.markdown("**Strengths identified:** " + "; ".join(summary["strengths"]))
        if summary["areas_to_strengthen"]:
            st.warning("**Areas to strengthen:** " + "; ".join(summary["areas_to_strengthen"]))

    with right:
        st.subheader(f"{fs.funder_profile.name} priorities")
        for value in fs.funder_profile.values:
            st.markdown(f"- {value}")
        st.caption(f"**Tip:** {fs.funder_profile.tip}")

    st.subheader("A few questions")
    for q in QUESTIONS:
        with st.container(border=True):
            _render_question(fs, q)

    col1, col2 = st.columns(2)
    if col1.button("Re-analyse"):
        with st.spinner("Re-analysing with your updates…"):
            outcome = analyse_session(st.session_state.funding_session)
        if outcome.ok:
            st.session_state.funding_session = outcome.session
            st.session_state.reseed_widgets = True
            st.rerun()
        st.error(outcome.error)
    if col2.button("Generate funding request", type="primary"):
        with st.spinner("Writing your funding request…"):
            outcome = generate_for_session(st.session_state.funding_session)
        if outcome.ok:
            st.session_state.funding_session = outcome.session
            _go(3)
            st.rerun()
        st.error(outcome.error)


# --- Step 3: final output ---
def render_step3():
    fs = st.session_state.funding_session
    out = fs.output
    st.subheader("Your funding request")
    # Local output is escaped by the synthesizer; remote output is rendered as the service sent it.
    st.markdown(out.document, unsafe_allow_html=True)

    st.subheader("How this aligns with the funder")
    st.markdown(out.alignment, unsafe_allow_html=True)

    if out.gaps:
        st.subheader("Before you submit")
        for gap in out.gaps:
            st.markdown(f"- {gap}")

    col1, col2, col3, col4 = st.columns(4)
    col1.download_button("Download as text", document_to_text(out.document),
                         file_name="funding_request.txt")
    col2.download_button("Download as Word", docx_bytes(out.document, alignment_html=out.alignment),
                         file_name="funding_request.docx")
    col3.button("Back to questions", on_click=_go, args=(2,))
    col4.button("Start over", on_click=_start_over)


if st.session_state.step == 1:
    render_step1()
elif st.session_state.step == 2:
    render_step2()
else:
    render_step3()
