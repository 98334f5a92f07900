"""
QuickNote Streamlit UI — main entry point.

Run with: ``streamlit run src/ui/app.py``

Probes the backend session once per browser session, then applies the route
guard before any page body is drawn.
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/),
# which removes the project root needed for absolute ``src.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import logging  # noqa: E402

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.services.navigation import Route, can_render, resolve_redirect  # noqa: E402
from src.ui.state import get_history, get_session_store, reset_controllers  # noqa: E402
from src.ui.utils import run_async  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="QuickNote",
    page_icon="\U0001f399️",
    layout="wide",
)

_settings = get_settings()
logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.api_base_url,
    "result_id": None,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Session probe (once per browser session)
# ---------------------------------------------------------------------------
store = get_session_store()
if store.is_loading:
    with st.spinner("Initializing..."):
        run_async(store.refresh_session())

# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------
PAGES = {
    Route.home: st.Page("pages/00_home.py", title="Home", icon="\U0001f3e0", default=True),
    Route.login: st.Page("pages/01_login.py", title="Login", icon="\U0001f511"),
    Route.register: st.Page("pages/02_register.py", title="Register", icon="\U0001f4dd"),
    Route.transcribe: st.Page("pages/03_transcribe.py", title="Transcribe", icon="\U0001f3a4"),
    Route.history: st.Page("pages/04_history.py", title="History", icon="\U0001f4cb"),
    Route.result: st.Page("pages/05_result.py", title="Result", icon="\U0001f4c4"),
}
st.session_state["_pages"] = PAGES

with st.sidebar:
    st.title("\U0001f399️ QuickNote")
    st.caption("Speaker-separated transcripts and summaries")
    st.divider()

    if store.identity is not None:
        st.markdown(f"Signed in as **{store.identity.email or store.identity.id}**")
        st.page_link(PAGES[Route.transcribe], label="Transcribe", icon="\U0001f3a4")
        st.page_link(PAGES[Route.history], label="History", icon="\U0001f4cb")
        if st.button("Logout", use_container_width=True):
            run_async(store.sign_out())
            reset_controllers()
            logger.info("User signed out")
            st.switch_page(PAGES[Route.home])
    else:
        st.page_link(PAGES[Route.home], label="Home", icon="\U0001f3e0")
        st.page_link(PAGES[Route.login], label="Login", icon="\U0001f511")
        st.page_link(PAGES[Route.register], label="Register", icon="\U0001f4dd")

    st.divider()
    st.caption(f"Backend: {st.session_state.api_base_url}")

nav = st.navigation(list(PAGES.values()), position="hidden")
route = next((r for r, page in PAGES.items() if page == nav), Route.home)

# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------
target = resolve_redirect(route, store)
if target is not None:
    logger.debug("Redirecting %s -> %s", route, target)
    st.switch_page(PAGES[target])

if not can_render(route, store):
    st.info("Verifying session...")
    st.stop()

# Entering the history page always fetches a fresh list
previous_route = st.session_state.get("_current_route")
st.session_state["_current_route"] = route
if route is Route.history and previous_route is not Route.history:
    get_history().mark_stale()

nav.run()
