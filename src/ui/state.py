"""
Per-browser-session service objects.

Everything that holds user state (the cookie jar, the session store, the
page controllers) lives in ``st.session_state`` so that two browser sessions
never share a backend cookie; ``st.cache_resource`` is not used for them.
"""

import logging

import streamlit as st

from src.core.config import get_settings
from src.services.api_client import APIClient
from src.services.auth import AuthGateway
from src.services.history import HistoryController
from src.services.result_viewer import ResultViewer
from src.services.session import SessionStore
from src.services.workflow import WorkflowController

logger = logging.getLogger(__name__)

_CLIENT_KEY = "_api_client"
_STORE_KEY = "_session_store"
_CONTROLLER_KEYS = ("_workflow", "_history", "_result_viewer")
# Page-level markers that refer to data owned by the controllers above
_PAGE_KEYS = ("_transcribe_file_id", "_result_loaded_id", "result_id")


def get_api_client() -> APIClient:
    """Return this browser session's APIClient, rebuilding it if the URL changed."""
    base_url = st.session_state.get("api_base_url") or get_settings().api_base_url
    client = st.session_state.get(_CLIENT_KEY)
    if client is None or client.base_url != base_url.rstrip("/"):
        logger.debug("Creating API client for %s", base_url)
        client = APIClient(base_url=base_url)
        st.session_state[_CLIENT_KEY] = client
        st.session_state.pop(_STORE_KEY, None)
        reset_controllers()
    return client


def get_auth_gateway() -> AuthGateway:
    return AuthGateway(get_api_client())


def get_session_store() -> SessionStore:
    client = get_api_client()
    store = st.session_state.get(_STORE_KEY)
    if store is None:
        store = SessionStore(AuthGateway(client))
        st.session_state[_STORE_KEY] = store
    return store


def get_workflow() -> WorkflowController:
    if "_workflow" not in st.session_state:
        st.session_state["_workflow"] = WorkflowController(get_api_client())
    return st.session_state["_workflow"]


def get_history() -> HistoryController:
    if "_history" not in st.session_state:
        st.session_state["_history"] = HistoryController(get_api_client())
    return st.session_state["_history"]


def get_result_viewer() -> ResultViewer:
    if "_result_viewer" not in st.session_state:
        st.session_state["_result_viewer"] = ResultViewer(get_api_client())
    return st.session_state["_result_viewer"]


def reset_controllers() -> None:
    """Dispose page controllers (on logout or backend change)."""
    for key in _CONTROLLER_KEYS:
        controller = st.session_state.pop(key, None)
        if controller is not None:
            controller.dispose()
    for key in _PAGE_KEYS:
        st.session_state.pop(key, None)
    for key in list(st.session_state.keys()):
        if str(key).startswith("_export_file_"):
            del st.session_state[key]
