"""
Contract Advisor - Streamlit Application

Flow:
- Disclaimer and consent gate
- Project form (details plus one or more issues)
- Report view, with the option to draft a formal letter
- Saved reports in the sidebar
"""

import logging
import sys
from pathlib import Path

import streamlit as st

# Setup
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import (
    ANALYSIS_MODE, ANALYSIS_MODE_LLM, PRODUCT_NAME, VERSION,
    setup_environment,
)
setup_environment()

from core.errors import AdvisorError, MissingProjectFields, UpstreamGenerationFailure
from core.export import (
    export_filename,
    export_letter_docx,
    export_report_docx,
    format_letter_text,
    format_report_plaintext,
)
from core.pipeline import generate_letter, generate_report
from models.app_state import (
    add_issue,
    give_consent,
    remove_issue,
    update_issue,
    update_project_details,
    with_draft,
    with_letter_choice,
    with_report,
)
from models.schemas import ContractType, OrganizationRole
from ui.components.sidebar import render_sidebar
from ui.utils.session_state import clear_exports, get_app_state, get_store, init_state, set_app_state

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


# =============================================================================
# Page Config
# =============================================================================

st.set_page_config(
    page_title=f"{PRODUCT_NAME} v{VERSION}",
    page_icon="📑",
    layout="wide",
)

init_state()


# =============================================================================
# Disclaimer
# =============================================================================

DISCLAIMER = [
    f"{PRODUCT_NAME} is designed to help any party involved in a UK building contract, whether a "
    "Client, Main Contractor or Sub-contractor, explore specific issues, including general queries "
    "regarding relevant clauses, disputes or general concerns.",
    f"Simply input your query and {PRODUCT_NAME} will return an appropriate response or provide an "
    "indication of what recourse might be available within the Contract to resolve the issues described.",
    "Please be aware that the information and responses provided within this app are for informational "
    "and educational purposes only. They are not intended to constitute, nor should they be considered "
    "as, legal or contractual advice.",
    "We strongly recommend that you consult with a qualified Legal Professional before making any "
    "decisions or taking any legal actions based on the content in this app.",
]


def render_disclaimer():
    st.header(f"Welcome to {PRODUCT_NAME}")
    for paragraph in DISCLAIMER:
        st.write(paragraph)

    st.write(
        f"If you wish to continue, please confirm that you understand that {PRODUCT_NAME} does not "
        "provide contractual or legal advice and is intended for information and education purposes only."
    )
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Yes, I Understand and Consent", type="primary", use_container_width=True):
            st.session_state.declined = False
            set_app_state(give_consent(get_app_state()))
            st.rerun()
    with col2:
        if st.button("No, I Do Not Consent", use_container_width=True):
            st.session_state.declined = True
    if st.session_state.declined:
        st.warning(
            f"We understand your decision. You cannot proceed with using {PRODUCT_NAME} "
            "without accepting the terms."
        )


# =============================================================================
# Project form
# =============================================================================

def _optional_index(options: list, value) -> int:
    return options.index(value) if value in options else 0


def render_project_form():
    state = get_app_state()
    project = state.project_details
    st.header("Project Details")

    name = st.text_input("Project Name", value=project.project_name)
    description = st.text_area("Project Description", value=project.project_description, height=100)

    contract_options = [None] + list(ContractType)
    contract = st.selectbox(
        "Contract Type",
        contract_options,
        index=_optional_index(contract_options, project.contract_type),
        format_func=lambda v: "Select a contract type" if v is None else v.value,
    )
    role_options = [None] + list(OrganizationRole)
    role = st.selectbox(
        "Your Organization Role",
        role_options,
        index=_optional_index(role_options, project.organization_role),
        format_func=lambda v: "Select your role" if v is None else v.value,
    )

    state = update_project_details(
        state,
        project_name=name,
        project_description=description,
        contract_type=contract,
        organization_role=role,
    )

    st.subheader("Issues")
    removed = None
    for i, issue in enumerate(state.project_details.issues):
        with st.container(border=True):
            st.markdown(f"**Issue {i + 1}**")
            desc = st.text_area("Describe the issue", value=issue.description, key=f"issue_desc_{i}")
            actions = st.text_area(
                "Actions taken so far (optional)", value=issue.actions_taken, key=f"issue_actions_{i}",
            )
            state = update_issue(state, i, "description", desc)
            state = update_issue(state, i, "actions_taken", actions)
            if len(state.project_details.issues) > 1 and st.button("Remove issue", key=f"remove_{i}"):
                removed = i
    set_app_state(state)

    if removed is not None:
        set_app_state(remove_issue(state, removed))
        # Keyed widgets hold stale text after the shift
        for key in [k for k in st.session_state.keys() if str(k).startswith("issue_")]:
            del st.session_state[key]
        st.rerun()

    if st.button("➕ Add another issue"):
        set_app_state(add_issue(state))
        st.rerun()

    st.divider()
    if st.button("Generate Report", type="primary", use_container_width=True):
        _generate_report()


def _generate_report():
    state = get_app_state()
    # The LLM engine saves each report as it is generated
    store = get_store() if ANALYSIS_MODE == ANALYSIS_MODE_LLM else None
    try:
        with st.spinner("Analysing your contract issues..."):
            report = generate_report(state.project_details, store=store, owner_id=st.session_state.user_id)
    except MissingProjectFields as e:
        st.error("Please complete: " + ", ".join(e.missing))
        return
    except UpstreamGenerationFailure as e:
        logger.error("Report generation failed: %s", e)
        st.error(f"The analysis service is unavailable: {e}")
        return
    except AdvisorError as e:
        logger.error("Report generation failed: %s", e)
        st.error(f"Report generation failed: {e}")
        return
    set_app_state(with_report(state, report))
    clear_exports()
    st.rerun()


# =============================================================================
# Report view
# =============================================================================

def _render_list(title: str, items: list[str]):
    if items:
        st.markdown(f"**{title}**")
        st.markdown("\n".join(f"- {item}" for item in items))


def render_report():
    state = get_app_state()
    report = state.report
    details = report.project_details

    st.header(f"Contract Report: {details.project_name}")
    st.caption(f"Generated {report.date.strftime('%d %B %Y %H:%M')}")
    st.write(f"**Contract Type:** {details.contract_type.value if details.contract_type else ''}")
    st.write(f"**Organization Role:** {details.organization_role.value if details.organization_role else ''}")
    if details.project_description:
        st.write(details.project_description)

    for i, analysis in enumerate(report.analysis, start=1):
        with st.expander(f"Issue {i}: {analysis.issue[:80]}", expanded=(i == 1)):
            if analysis.actions_taken:
                st.markdown(f"**Actions Taken:** {analysis.actions_taken}")
            for title, body in (
                ("Detailed Analysis", analysis.detailed_analysis),
                ("Legal Context", analysis.legal_context),
            ):
                if body:
                    st.markdown(f"**{title}**")
                    st.markdown(body)
            _render_list("Relevant Contract Clauses", analysis.relevant_clauses)
            _render_list("Clause Explanations", analysis.clause_explanations)
            _render_list("Recommendations", analysis.recommendations)
            for title, body in (
                ("Potential Outcomes", analysis.potential_outcomes),
                ("Timeline Suggestions", analysis.timeline_suggestions),
                ("Risk Assessment", analysis.risk_assessment),
            ):
                if body:
                    st.markdown(f"**{title}**")
                    st.markdown(body)

    _render_report_actions()
    st.divider()
    _render_letter_section()


def _render_report_actions():
    report = get_app_state().report
    name = report.project_details.project_name
    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("💾 Save Report", use_container_width=True):
            try:
                get_store().save(report, st.session_state.user_id)
                st.success("Report saved")
            except AdvisorError as e:
                st.error(f"Could not save report: {e}")
    with col2:
        st.download_button(
            "⬇️ Download Text",
            format_report_plaintext(report),
            export_filename("Contract_Report", name, "txt"),
            use_container_width=True,
        )
    with col3:
        # Pre-generate DOCX and store path (avoids nested button problem)
        docx_path = st.session_state.get("_docx_path")
        if docx_path:
            with open(docx_path, "rb") as f:
                st.download_button(
                    "⬇️ Download DOCX", f, Path(docx_path).name,
                    mime=DOCX_MIME, use_container_width=True,
                )
        elif st.button("📥 Generate DOCX", use_container_width=True):
            path = export_report_docx(report)
            if path:
                st.session_state["_docx_path"] = path
                st.rerun()
            else:
                st.error("DOCX generation failed. Check the python-docx installation.")


# =============================================================================
# Letter
# =============================================================================

def _render_letter_section():
    state = get_app_state()
    st.subheader("Draft Communication")

    if state.should_generate_letter is None:
        st.write(
            "Would you like a draft formal letter addressing these issues? The letter references the "
            "relevant contract clauses and sets out your requests to the other party."
        )
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Yes, draft a letter", type="primary", use_container_width=True):
                _draft_letter()
        with col2:
            if st.button("No thanks", use_container_width=True):
                set_app_state(with_letter_choice(state, False))
                st.rerun()
        return

    if state.should_generate_letter is False:
        if st.button("Draft a letter after all"):
            set_app_state(with_letter_choice(state, True))
            st.rerun()
        return

    if state.draft_communication is None:
        if st.button("Draft letter", type="primary"):
            _draft_letter()
        return

    _render_letter()


def _draft_letter():
    state = get_app_state()
    try:
        with st.spinner("Drafting letter..."):
            draft = generate_letter(state.report)
    except AdvisorError as e:
        logger.error("Letter drafting failed: %s", e)
        st.error(f"Letter drafting failed: {e}")
        return
    set_app_state(with_draft(state, draft))
    st.session_state["_letter_docx_path"] = ""
    st.rerun()


def _render_letter():
    state = get_app_state()
    draft = state.draft_communication
    name = state.report.project_details.project_name

    with st.container(border=True):
        st.markdown(f"**To:** {draft.to}")
        st.markdown(f"**Subject:** {draft.subject}")
        st.write(draft.greeting)
        st.markdown(draft.body)
        st.write(draft.closing)
        st.text(draft.sender)

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "⬇️ Download Letter (Text)",
            format_letter_text(draft),
            export_filename("Draft_Communication", name, "txt"),
            use_container_width=True,
        )
    with col2:
        letter_path = st.session_state.get("_letter_docx_path")
        if letter_path:
            with open(letter_path, "rb") as f:
                st.download_button(
                    "⬇️ Download Letter (DOCX)", f, Path(letter_path).name,
                    mime=DOCX_MIME, use_container_width=True,
                )
        elif st.button("📥 Generate Letter DOCX", use_container_width=True):
            path = export_letter_docx(draft, name)
            if path:
                st.session_state["_letter_docx_path"] = path
                st.rerun()
            else:
                st.error("DOCX generation failed. Check the python-docx installation.")


# =============================================================================
# Main
# =============================================================================

def main():
    state = get_app_state()
    if not state.has_consented:
        render_disclaimer()
        return

    render_sidebar()
    if state.report is None:
        render_project_form()
    else:
        render_report()


if __name__ == "__main__":
    main()
