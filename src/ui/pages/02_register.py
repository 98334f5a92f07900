"""
Registration page — create an account, then continue to login.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.exceptions import FieldValidationError, QuickNoteError  # noqa: E402
from src.services.navigation import Route  # noqa: E402
from src.ui.state import get_auth_gateway  # noqa: E402
from src.ui.utils import run_async  # noqa: E402

pages = st.session_state["_pages"]

st.header("Create Account")
st.caption("Sign up to start transcribing your audio.")

with st.form("register_form"):
    email = st.text_input("Email address", placeholder="you@example.com")
    password = st.text_input("Password", type="password")
    confirm_password = st.text_input("Confirm password", type="password")
    submitted = st.form_submit_button("Sign up", type="primary", use_container_width=True)

if submitted:
    with st.spinner("Creating account..."):
        try:
            run_async(get_auth_gateway().register(email, password, confirm_password))
        except FieldValidationError as exc:
            st.error(exc.detail)
            for field, message in exc.field_errors.items():
                if message != exc.detail:
                    st.caption(f"**{field}**: {message}")
        except QuickNoteError as exc:
            st.error(exc.detail)
        else:
            st.session_state["_registered_toast"] = True
            st.switch_page(pages[Route.login])

st.page_link(pages[Route.login], label="Already have an account? Log in")
