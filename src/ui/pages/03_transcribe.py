"""
Transcribe page — pick an audio file, submit it, show the result.

UX flow: idle -> validating -> submitting -> succeeded / failed_hard / failed_soft
Soft failures (server busy, unreachable) point the user to the history page
because the backend may still be processing the upload.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.core.models import SubmissionState  # noqa: E402
from src.services.navigation import Route  # noqa: E402
from src.ui.components.transcript_view import render_summary, render_transcript  # noqa: E402
from src.ui.state import get_history, get_workflow  # noqa: E402
from src.ui.utils import run_async, to_audio_file  # noqa: E402

pages = st.session_state["_pages"]
workflow = get_workflow()

st.header("Transcribe Audio")
st.caption(
    "Upload your audio files and get accurate, speaker-separated text transcripts in minutes."
)

# -- File selection --
uploaded = st.file_uploader(
    "Select audio file",
    disabled=workflow.is_busy,
    help="Allowed: " + ", ".join(ext.upper() for ext in get_settings().allowed_audio_extensions),
)
file_id = getattr(uploaded, "file_id", None)
if st.session_state.get("_transcribe_file_id") != file_id:
    st.session_state["_transcribe_file_id"] = file_id
    workflow.select_file(to_audio_file(uploaded))

job = workflow.job
if job.file is not None:
    st.caption(f"Selected: **{job.file.filename}** ({job.file.size / 1_048_576:.1f} MB)")

# -- Submit --
if st.button(
    "Start Transcription & Summary",
    type="primary",
    disabled=not workflow.can_submit,
    use_container_width=True,
):
    with st.spinner("Transcribing... this can take a few minutes for long recordings."):
        run_async(workflow.submit())
    # The upload may have created a history entry, even on a soft failure
    get_history().mark_stale()
    job = workflow.job

# -- Outcome --
if job.message and not workflow.is_busy:
    if job.state is SubmissionState.failed_soft:
        st.info(job.message)
        st.page_link(pages[Route.history], label="View History", icon="\U0001f4cb")
    elif job.state is SubmissionState.succeeded:
        st.warning(job.message)
    else:
        st.error(job.message)

if workflow.show_summary:
    render_summary(job.summary_text)

if workflow.show_transcript:
    render_transcript(job.segments)

if job.state.terminal and st.button("Clear results"):
    workflow.acknowledge()
    st.rerun()
