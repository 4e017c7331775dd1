"""
Integration tests for the full user flow: form -> report -> save -> letter -> export.

- Template engine end to end with a file-backed store
- LLM engine end to end with the Gemini call patched
"""

from __future__ import annotations

import random
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from docx import Document

from core.export import export_letter_docx, export_report_docx, format_letter_text
from core.pipeline import generate_letter, generate_report
from models.app_state import (
    AppState,
    add_issue,
    give_consent,
    update_issue,
    update_project_details,
    with_draft,
    with_report,
)
from models.report_store import ReportStore


@pytest.fixture
def filled_state() -> AppState:
    state = give_consent(AppState())
    state = update_project_details(
        state,
        project_name="Riverside Offices",
        contract_type="NEC4 Engineering and Construction Contract (ECC)",
        organization_role="Client/Employer",
    )
    state = update_issue(state, 0, "description", "Delay to completion caused by late design information")
    state = add_issue(state)
    state = update_issue(state, 1, "description", "Defective render on the east elevation")
    return update_issue(state, 1, "actions_taken", "Issued a defect notice")


@pytest.fixture
def outputs(tmp_path, monkeypatch) -> Path:
    folder = tmp_path / "outputs"
    monkeypatch.setattr("core.export.OUTPUTS_FOLDER", folder)
    return folder


def test_template_flow(filled_state, tmp_path, outputs):
    store = ReportStore(tmp_path / "reports")
    report = generate_report(filled_state.project_details, mode="template", store=store, owner_id="user-a")
    state = with_report(filled_state, report)

    assert [a.issue for a in state.report.analysis] == [
        "Delay to completion caused by late design information",
        "Defective render on the east elevation",
    ]
    assert "Clause 61.3" in report.analysis[0].relevant_clauses
    assert [r.id for r in store.list_for_owner("user-a")] == [report.id]

    draft = generate_letter(report, mode="template", rng=random.Random(1), today=date(2025, 3, 7))
    state = with_draft(state, draft)
    assert state.draft_communication.to == "The Contractor"
    assert "we have already undertaken the following actions: Issued a defect notice." in draft.body

    report_path = export_report_docx(report)
    letter_path = export_letter_docx(draft, report.project_details.project_name)
    assert Path(report_path).parent == outputs
    assert "Issue 2: Defective render on the east elevation" in [p.text for p in Document(report_path).paragraphs]
    assert "To: The Contractor" in [p.text for p in Document(letter_path).paragraphs]
    assert format_letter_text(draft).startswith("Dear Sir/Madam,")


def test_llm_flow(filled_state):
    answer = (
        "ISSUE 1:\n"
        "Detailed Analysis:\nLate design information is a compensation event.\n\n"
        "Relevant Contract Clauses:\n- Clause 60.1(3)\n\n"
        "Recommendations:\n- Assess the quotation promptly.\n\n"
        "ISSUE 2:\n"
        "Detailed Analysis:\nThe render is a Defect.\n\n"
        "Recommendations:\n- Instruct correction within the defect correction period.\n"
    )
    letter = "Dear Sir/Madam,\n\nPlease correct the render.\n\nYours faithfully,\nClient"

    def fake_response(text):
        response = MagicMock()
        response.text = text
        response.usage_metadata.prompt_token_count = 100
        response.usage_metadata.candidates_token_count = 200
        return response

    with patch("core.llm_client._call_gemini", side_effect=[fake_response(answer), fake_response(letter)]):
        report = generate_report(filled_state.project_details, mode="llm")
        draft = generate_letter(report, mode="llm", rng=random.Random(0), today=date(2025, 3, 7))

    first, second = report.analysis
    assert first.relevant_clauses == ["Clause 60.1(3)"]
    assert first.recommendations == ["Assess the quotation promptly."]
    # Issue 2 named no clauses: NEC defect clauses from the catalogue
    assert second.relevant_clauses[0] == "Clause 40.1"
    assert second.actions_taken == "Issued a defect notice"

    assert draft.body == "Please correct the render."
    assert draft.sender == "Client"
    assert draft.to == "The Contractor"
