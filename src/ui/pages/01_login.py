"""
Login page — email/password sign-in.

On success the session is re-probed before moving to the transcribe page,
since the login response itself does not describe the user.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.exceptions import QuickNoteError  # noqa: E402
from src.core.models import Credentials  # noqa: E402
from src.services.navigation import LANDING_ROUTE, Route  # noqa: E402
from src.ui.state import get_session_store  # noqa: E402
from src.ui.utils import run_async  # noqa: E402

pages = st.session_state["_pages"]
store = get_session_store()

st.header("Welcome Back")
st.caption("Log in to access your transcriptions.")

if st.session_state.pop("_registered_toast", False):
    st.success("Registration successful! Please log in.")

with st.form("login_form"):
    email = st.text_input("Email address", placeholder="you@example.com")
    password = st.text_input("Password", type="password")
    submitted = st.form_submit_button("Log in", type="primary", use_container_width=True)

if submitted:
    with st.spinner("Logging in..."):
        try:
            identity = run_async(
                store.sign_in(Credentials(username=email, password=password))
            )
        except QuickNoteError as exc:
            st.error(exc.detail)
        else:
            if identity is None:
                st.error(
                    "Login succeeded but the session could not be verified. Please try again."
                )
            else:
                st.switch_page(pages[LANDING_ROUTE])

st.page_link(pages[Route.register], label="Don't have an account? Sign up")
