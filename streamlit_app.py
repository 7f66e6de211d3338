"""Streamlit Web UI for ats-optimizer.

Three steps:
  upload    : PDF/DOCX resume → extraction + analysis
  dashboard : ATS score, score breakdown, skill gaps, job match
  editor    : rewrite all sections, compare with original, edit, export
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the LLM client can read them
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except Exception:
        pass

from ats_optimizer.clients.llm_client import LLMClient
from ats_optimizer.config import load_config
from ats_optimizer.errors import ATSOptimizerError
from ats_optimizer.export import EXPORT_FORMATS, MIME_TYPES, export_filename, render_bytes
from ats_optimizer.export.normalizer import normalize_text
from ats_optimizer.models.session import AppStep, SessionState
from ats_optimizer.parsers.resume_parser import SUPPORTED_EXTENSIONS
from ats_optimizer.pipeline.orchestrator import ResumeWorkflow
from ats_optimizer.storage.session_store import SessionStore

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="ATS Optimizer",
    page_icon=":page_facing_up:",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@st.cache_resource
def _get_config():
    return load_config()


@st.cache_resource
def _get_store() -> SessionStore:
    return SessionStore(db_path=_get_config().session.resolved_db_path)


def _get_workflow() -> ResumeWorkflow:
    config = _get_config()
    llm = LLMClient.from_config(config.llm)
    return ResumeWorkflow(
        llm,
        model=config.llm.model,
        analysis_temperature=config.llm.analysis_temperature,
        rewrite_temperature=config.llm.rewrite_temperature,
        match_temperature=config.llm.match_temperature,
    )


def _state() -> SessionState:
    if "session" not in st.session_state:
        st.session_state["session"] = _get_store().load()
    return st.session_state["session"]


def _commit(state: SessionState) -> None:
    """Swap in the new session state and persist it."""
    st.session_state["session"] = state
    _get_store().save(state)


def _save_upload_to_tmp(uploaded_file) -> Path:
    """Save a Streamlit UploadedFile to a temp file and return its Path."""
    suffix = Path(uploaded_file.name).suffix
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    tmp.write(uploaded_file.getvalue())
    tmp.close()
    return Path(tmp.name)


def _reset() -> None:
    _get_store().clear()
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    st.session_state["session"] = ResumeWorkflow.reset()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("ATS Optimizer")
    st.caption("Resume ATS audit, rewrite and export")
    if _state().step != AppStep.UPLOAD:
        st.button("New analysis", on_click=_reset, type="secondary")


# ---------------------------------------------------------------------------
# Step: upload
# ---------------------------------------------------------------------------


def _step_upload(state: SessionState) -> None:
    st.header("Beat the bots")
    st.markdown("Upload your resume to get an ATS compliance score and a gap report.")

    resume_file = st.file_uploader(
        "Resume",
        type=[ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS],
        help="PDF or DOCX (10MB max)",
    )
    if resume_file and resume_file.size > 10 * 1024 * 1024:
        st.error("The resume file is larger than 10MB.")
        return
    if not resume_file or not st.button("Analyze", type="primary"):
        return

    tmp_path = _save_upload_to_tmp(resume_file)
    try:
        with st.spinner("Running the analysis engine..."):
            new_state = asyncio.run(_get_workflow().analyze_file(state, tmp_path))
    except ATSOptimizerError as exc:
        st.error(exc.message)
        return
    finally:
        tmp_path.unlink(missing_ok=True)

    _commit(new_state)
    st.rerun()


# ---------------------------------------------------------------------------
# Step: dashboard
# ---------------------------------------------------------------------------


def _step_dashboard(state: SessionState) -> None:
    analysis = state.analysis
    if analysis is None:
        _commit(ResumeWorkflow.reset())
        st.rerun()
        return

    score = analysis.overall_score
    col1, col2, col3 = st.columns(3)
    col1.metric("ATS Compliance Index", f"{score}%")
    col2.metric("Detected role", analysis.detected_role)
    col3.metric("Quantified bullets", f"{round(analysis.metrics.metric_ratio * 100)}%")
    if score < 35:
        st.error("Critical: this resume is likely to be filtered out.")
    elif score >= 75:
        st.success("Excellent ATS compliance.")

    st.subheader("Score breakdown")
    st.table([
        {"term": name.replace("_", " "), "points": round(value, 1)}
        for name, value in analysis.score_breakdown.as_dict().items()
    ])

    left, right = st.columns(2)
    with left:
        st.markdown("**Hard skills found**")
        st.write(", ".join(analysis.hard_skills_found) or "-")
        st.markdown("**Soft skills found**")
        st.write(", ".join(analysis.soft_skills_found) or "-")
        for item in analysis.strengths:
            st.markdown(f"- {item}")
    with right:
        st.markdown("**Missing hard skills**")
        st.write(", ".join(analysis.missing_hard_skills) or "-")
        for item in analysis.critical_errors:
            st.error(item)
        for item in analysis.formatting_issues:
            st.warning(item)
    if analysis.summary_feedback:
        st.info(analysis.summary_feedback)

    if st.button("Open editor", type="primary"):
        _commit(_get_workflow().open_editor(state))
        st.rerun()

    _job_match(state)


def _job_match(state: SessionState) -> None:
    st.subheader("Job match")
    jd_file = st.file_uploader("Or upload the job description", type=["pdf", "docx", "txt"])
    # read each upload once so later edits in the text area are kept
    if jd_file and st.session_state.get("jd_file_id") != jd_file.file_id:
        tmp_path = _save_upload_to_tmp(jd_file)
        try:
            st.session_state["jd_text"] = asyncio.run(
                ResumeWorkflow.read_job_description(tmp_path)
            )
        except ATSOptimizerError as exc:
            st.error(exc.message)
        finally:
            tmp_path.unlink(missing_ok=True)
        st.session_state["jd_file_id"] = jd_file.file_id

    jd_text = st.text_area("Paste the job description", key="jd_text", height=200)
    if st.button("Match"):
        try:
            with st.spinner("Comparing with the job description..."):
                st.session_state["match_result"] = asyncio.run(
                    _get_workflow().match_job(state, jd_text)
                )
        except ATSOptimizerError as exc:
            st.error(exc.message)

    result = st.session_state.get("match_result")
    if result is None:
        return
    st.metric("Job Match Score", f"{result.match_percentage}%")
    st.write(result.match_feedback)
    st.markdown(f"**Matching:** {', '.join(result.matching_keywords) or '-'}")
    st.markdown(f"**Missing:** {', '.join(result.missing_keywords) or '-'}")
    if not result.tailored_sections:
        return

    tailored = ResumeWorkflow.tailored_sections(result)
    basename = _get_config().export.basename
    for col, fmt in zip(st.columns(len(EXPORT_FORMATS)), EXPORT_FORMATS):
        col.download_button(
            f"Download tailored {fmt.upper()}",
            data=render_bytes(tailored, fmt),
            file_name=export_filename(fmt, basename),
            mime=MIME_TYPES[fmt],
            key=f"tailored_{fmt}",
        )
    if st.button("Apply tailored resume"):
        st.session_state.pop("match_result", None)
        _commit(_get_workflow().apply_tailoring(state, result))
        st.rerun()


# ---------------------------------------------------------------------------
# Step: editor
# ---------------------------------------------------------------------------


def _step_editor(state: SessionState) -> None:
    workflow = _get_workflow()

    top = st.columns([1, 1, 1, 3])
    if top[0].button("Back"):
        _commit(workflow.open_dashboard(state))
        st.rerun()
    for col, (label, mode) in zip(
        top[1:3],
        (("Professional boost (all)", "professional"), ("ATS optimized (all)", "ats_optimized")),
    ):
        if col.button(label):
            try:
                with st.spinner("Rewriting every section..."):
                    new_state = asyncio.run(workflow.rewrite_all(state, mode))
            except ATSOptimizerError as exc:
                st.error(exc.message)
            else:
                _commit(new_state)
                st.rerun()

    with top[3]:
        cols = st.columns(len(EXPORT_FORMATS))
        basename = _get_config().export.basename
        for col, fmt in zip(cols, EXPORT_FORMATS):
            col.download_button(
                f"Export {fmt.upper()}",
                data=render_bytes(state.sections, fmt),
                file_name=export_filename(fmt, basename),
                mime=MIME_TYPES[fmt],
            )

    for section in state.sections:
        st.subheader(section.title)
        peek = section.has_original and st.toggle("Compare with original", key=f"peek_{section.id}")
        shown = section.original_content if peek else section.content
        edited = st.text_area(
            "Content",
            value=shown,
            key=f"content_{section.id}_{peek}_{hash(shown)}",
            height=200,
            disabled=peek,
            label_visibility="collapsed",
        )
        st.caption(normalize_text(shown)[:300])
        if not peek and edited != section.content:
            _commit(workflow.edit_section(state, section.id, edited))
            st.rerun()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

_current = _state()
if _current.step == AppStep.DASHBOARD:
    _step_dashboard(_current)
elif _current.step == AppStep.EDITOR:
    _step_editor(_current)
else:
    _step_upload(_current)
