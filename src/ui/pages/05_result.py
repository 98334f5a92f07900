"""
Result page — one transcription: summary, transcript, and document export.

The record id comes from ``?id=`` or from the history page selection. Export
buttons stay disabled unless the record has a non-empty summary.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.models import ExportFormat  # noqa: E402
from src.services.navigation import Route  # noqa: E402
from src.ui.components.transcript_view import render_summary, render_transcript  # noqa: E402
from src.ui.state import get_result_viewer  # noqa: E402
from src.ui.utils import format_created_at, run_async  # noqa: E402

pages = st.session_state["_pages"]
viewer = get_result_viewer()

record_id = st.query_params.get("id") or st.session_state.get("result_id")

st.page_link(pages[Route.history], label="Back to History", icon="⬅️")

# Reload when the requested record changes
if st.session_state.get("_result_loaded_id") != record_id:
    st.session_state["_result_loaded_id"] = record_id
    for fmt in ExportFormat:
        st.session_state.pop(f"_export_file_{fmt.value}", None)
    with st.spinner("Loading transcription..."):
        run_async(viewer.load(record_id))

if viewer.error or viewer.detail is None:
    st.header("Error Loading Result")
    st.error(viewer.error or "The requested transcription details could not be loaded.")
    if st.button("Retry"):
        st.session_state.pop("_result_loaded_id", None)
        st.rerun()
    st.stop()

detail = viewer.detail
st.header(detail.filename or "Transcription Result")
st.caption(f"{format_created_at(detail.created_at)}  |  {detail.status or 'unknown'}")

# -- Export --
st.subheader("Export Summary")
if not viewer.can_export:
    st.caption("Export is available once a summary has been generated.")

export_cols = st.columns(len(ExportFormat))
for col, fmt in zip(export_cols, ExportFormat, strict=True):
    label = fmt.value.upper()
    file_key = f"_export_file_{fmt.value}"
    with col:
        if st.button(
            f"Prepare {label}",
            key=f"export_{fmt.value}",
            disabled=not viewer.export_enabled(fmt),
            use_container_width=True,
        ):
            with st.spinner(f"Exporting {label}..."):
                exported = run_async(viewer.export(fmt))
            if exported is not None:
                st.session_state[file_key] = exported

        exported = st.session_state.get(file_key)
        if exported is not None:
            st.download_button(
                f"Download {exported.filename}",
                data=exported.content,
                file_name=exported.filename,
                mime=exported.media_type,
                key=f"download_{fmt.value}",
                use_container_width=True,
            )
        if fmt in viewer.export_errors:
            st.error(viewer.export_errors[fmt])

render_summary(detail.summary_text)
render_transcript(detail.segments, title="Transcription")
