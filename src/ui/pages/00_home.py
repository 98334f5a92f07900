"""
Home page — short product description with entry points.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.services.navigation import Route  # noqa: E402
from src.ui.state import get_session_store  # noqa: E402

pages = st.session_state["_pages"]
store = get_session_store()

st.title("QuickNote")
st.markdown(
    "Upload your audio files and get accurate, speaker-separated text transcripts "
    "in minutes. Perfect for meetings, interviews, lectures, and more."
)

if store.identity is not None:
    st.page_link(pages[Route.transcribe], label="Start transcribing", icon="\U0001f3a4")
    st.page_link(pages[Route.history], label="View history", icon="\U0001f4cb")
else:
    col_login, col_register = st.columns(2)
    with col_login:
        st.page_link(pages[Route.login], label="Log in", icon="\U0001f511")
    with col_register:
        st.page_link(pages[Route.register], label="Create an account", icon="\U0001f4dd")
