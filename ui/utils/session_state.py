"""
Session State Management - one AppState per browser session.

The UI never edits AppState fields in place: it calls the pure functions
in models.app_state and stores the result back with set_app_state().
"""

import streamlit as st

from config.settings import DEFAULT_USER_ID
from models.app_state import AppState
from models.report_store import ReportStore


def init_state():
    """
    Initialize Streamlit session state with defaults.

    Idempotent: only sets keys that don't already exist.
    """
    defaults = {
        "app_state": AppState(),
        # Authentication is handled upstream; the owner id comes from config
        "user_id": DEFAULT_USER_ID,
        "report_store": None,
        # Generated DOCX paths (download buttons need the file before render)
        "_docx_path": "",
        "_letter_docx_path": "",
        # Set when the user declines the disclaimer
        "declined": False,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v

    if st.session_state.report_store is None:
        st.session_state.report_store = ReportStore()


def get_app_state() -> AppState:
    return st.session_state.app_state


def set_app_state(state: AppState) -> None:
    st.session_state.app_state = state


def get_store() -> ReportStore:
    return st.session_state.report_store


def clear_exports() -> None:
    """Forget generated DOCX files; they belong to the previous report."""
    st.session_state["_docx_path"] = ""
    st.session_state["_letter_docx_path"] = ""
