"""
History page — past transcriptions, newest first, with view and delete.

Deletion is two-step: "Delete" asks for confirmation naming the record,
"Confirm delete" sends the request.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.exceptions import ErrorKind  # noqa: E402
from src.services.navigation import Route  # noqa: E402
from src.ui.state import get_history  # noqa: E402
from src.ui.utils import format_created_at, run_async  # noqa: E402

pages = st.session_state["_pages"]
history = get_history()

col_title, col_refresh = st.columns([6, 1])
with col_title:
    st.header("Transcription History")
    st.caption("Review, view details, or delete your past transcriptions.")
with col_refresh:
    st.markdown("")  # vertical spacer
    refresh = st.button("Refresh", key="history_refresh")

if refresh or history.needs_load:
    with st.spinner("Loading history..."):
        run_async(history.load())

if "_history_toast" in st.session_state:
    st.toast(st.session_state.pop("_history_toast"))

if history.error:
    st.error(history.error)
    if history.error_kind is ErrorKind.auth_required:
        st.page_link(pages[Route.login], label="Log in again", icon="\U0001f511")

if not history.records:
    if history.error is None:
        st.info("No transcriptions yet.")
        st.page_link(pages[Route.transcribe], label="Transcribe your first file", icon="\U0001f3a4")
    st.stop()

st.caption(f"{len(history.records)} transcription(s)")

for record in history.records:
    with st.container(border=True):
        col_info, col_view, col_delete = st.columns([5, 1, 1])
        with col_info:
            st.markdown(f"**{record.display_name}**")
            st.caption(f"{format_created_at(record.created_at)}  |  {record.status or 'unknown'}")
        with col_view:
            if st.button("View", key=f"view_{record.id}"):
                st.session_state["result_id"] = record.id
                st.switch_page(pages[Route.result])
        with col_delete:
            if st.button("Delete", key=f"del_{record.id}", disabled=history.is_deleting(record.id)):
                history.request_delete(record.id)
                st.rerun()

        pending = history.pending_delete
        if pending is not None and pending.id == record.id:
            st.warning(history.request_delete(record.id))
            col_yes, col_no = st.columns(2)
            with col_yes:
                if st.button("Confirm delete", key=f"del_confirm_{record.id}", type="primary"):
                    with st.spinner("Deleting..."):
                        deleted = run_async(history.confirm_delete())
                    if deleted:
                        st.session_state["_history_toast"] = f'Deleted "{record.display_name}".'
                    st.rerun()
            with col_no:
                if st.button("Cancel", key=f"del_cancel_{record.id}"):
                    history.cancel_delete()
                    st.rerun()
