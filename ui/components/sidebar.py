"""
Sidebar component for Contract Advisor.

Shows engine status, the user's saved reports (load/delete) and session
controls.
"""

from __future__ import annotations

import logging

import streamlit as st

from config.settings import ANALYSIS_MODE, ANALYSIS_MODE_LLM, PRODUCT_NAME, VERSION, has_llm_credentials
from core.errors import AdvisorError
from models.app_state import reset_project, revoke_consent, with_report
from ui.utils.session_state import clear_exports, get_app_state, get_store, set_app_state

logger = logging.getLogger(__name__)


def render_sidebar():
    """Render the complete sidebar."""
    with st.sidebar:
        st.title(f"📑 {PRODUCT_NAME}")
        st.caption(f"v{VERSION}")

        st.divider()
        _render_system_status()

        st.divider()
        _render_saved_reports()

        st.divider()
        if st.button("🆕 New Project", use_container_width=True):
            set_app_state(reset_project(get_app_state()))
            clear_exports()
            st.rerun()
        if st.button("Withdraw Consent", use_container_width=True):
            set_app_state(revoke_consent(get_app_state()))
            st.rerun()


def _render_system_status():
    st.subheader("System Status")
    if ANALYSIS_MODE == ANALYSIS_MODE_LLM:
        if has_llm_credentials():
            st.success("LLM engine ✓")
        else:
            st.error("LLM engine ✗ (no credentials)")
    else:
        st.info("Template engine (offline)")


def _render_saved_reports():
    st.subheader("Saved Reports")
    user_id = st.session_state.user_id
    try:
        records = get_store().list_for_owner(user_id)
    except AdvisorError as e:
        st.error(f"Could not load saved reports: {e}")
        return

    if not records:
        st.caption("No saved reports yet.")
        return

    # Newest first in the list
    for record in reversed(records):
        details = record.project_details
        label = details.project_name or "Untitled"
        contract = details.contract_type.value if details.contract_type else ""
        st.write(f"**{label}**")
        st.caption(f"{record.date.strftime('%d/%m/%Y')} · {contract} · {len(record.analysis)} issue(s)")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Open", key=f"open_{record.id}", use_container_width=True):
                state = get_app_state()
                state = state.model_copy(update={"project_details": record.project_details})
                set_app_state(with_report(state, record.to_report()))
                clear_exports()
                st.rerun()
        with col2:
            if st.button("Delete", key=f"delete_{record.id}", use_container_width=True):
                try:
                    get_store().delete(record.id, user_id)
                except AdvisorError as e:
                    logger.warning("Delete failed for %s: %s", record.id, e)
                    st.error(f"Delete failed: {e}")
                else:
                    st.rerun()
