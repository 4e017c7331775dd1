"""
Unit tests for report and letter export.

Covers file naming, the markdown and plain-text layouts, letter text and
the python-docx rendering of a report.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from docx import Document

from core.export import (
    export_filename,
    export_letter_docx,
    export_report_docx,
    format_letter_text,
    format_report_markdown,
    format_report_plaintext,
    generate_docx,
)
from models.schemas import (
    Analysis,
    ContractType,
    DraftCommunication,
    Issue,
    OrganizationRole,
    ProjectDetails,
    Report,
)


@pytest.fixture
def report() -> Report:
    return Report(
        id="1741341000000",
        date=datetime(2025, 3, 7, 10, 0),
        project_details=ProjectDetails(
            project_name="Riverside Offices",
            project_description="Four-storey office block",
            contract_type=ContractType.JCT_STANDARD_BUILDING,
            organization_role=OrganizationRole.MAIN_CONTRACTOR,
            issues=[Issue(description="Late payment")],
        ),
        analysis=[
            Analysis(
                issue="Late payment",
                detailed_analysis="The employer has not paid.",
                legal_context="The **Construction Act** applies.",
                relevant_clauses=["Clause 4.8", "Clause 4.9"],
                clause_explanations=["Clause 4.8: interim payment."],
                recommendations=["Submit a payment notice.", "Keep records."],
                potential_outcomes="Payment in full.",
            )
        ],
    )


@pytest.fixture
def outputs(tmp_path, monkeypatch) -> Path:
    monkeypatch.setattr("core.export.OUTPUTS_FOLDER", tmp_path)
    return tmp_path


# =============================================================================
# Text formats
# =============================================================================

@pytest.mark.parametrize("name, expected", [
    ("My Project", "Contract_Report_My_Project.docx"),
    ("  Spaced   out  ", "Contract_Report_Spaced_out.docx"),
    ('A/B: "phase" 2?', "Contract_Report_AB_phase_2.docx"),
    ("", "Contract_Report_Untitled.docx"),
])
def test_export_filename(name, expected):
    assert export_filename("Contract_Report", name, "docx") == expected


def test_report_markdown_layout(report):
    md = format_report_markdown(report)
    assert md.startswith("# Contract Report: Riverside Offices\n")
    assert "Date: 07/03/2025" in md
    assert "Contract Type: JCT Standard Building Contract" in md
    assert "Organization Role: Main Contractor" in md
    assert "### Issue 1: Late payment" in md
    assert "Actions Taken: None" in md
    assert "#### Analysis:\nThe employer has not paid." in md
    assert "#### Relevant Contract Clauses:\n* Clause 4.8\n* Clause 4.9" in md
    assert "#### Recommendations:\n* Submit a payment notice.\n* Keep records." in md
    assert "#### Potential Outcomes:\nPayment in full." in md
    # Empty sections are left out
    assert "Risk Assessment" not in md


def test_report_plaintext_layout(report):
    text = format_report_plaintext(report)
    assert text.startswith("Contract Report: Riverside Offices\n")
    assert "#" not in text
    assert "Relevant Contract Clauses:\n- Clause 4.8\n- Clause 4.9" in text
    assert "Recommendations:\n- Submit a payment notice.\n- Keep records." in text
    assert "Potential Outcomes: Payment in full." in text


def test_letter_text():
    draft = DraftCommunication(
        to="The Contractor", subject="S", greeting="Dear Sir/Madam,",
        body="Body.", closing="Yours faithfully,", sender="[NAME]",
    )
    assert format_letter_text(draft) == "Dear Sir/Madam,\n\nBody.\n\nYours faithfully,\n\n[NAME]"


# =============================================================================
# DOCX
# =============================================================================

def test_generate_docx_headings_and_lists(outputs):
    content = "# Top\n\n## Second\nPlain **bold** text\n- bullet one\n1. numbered one"
    path = generate_docx(content, "sample.docx", title="Title line", metadata={"To": "X", "Skip": ""})

    assert path == str(outputs / "sample.docx")
    doc = Document(path)
    texts = [p.text for p in doc.paragraphs]
    assert texts.index("Title line") < texts.index("To: X") < texts.index("Top")
    assert not any(t.startswith("Skip") for t in texts)

    styles = {p.text: p.style.name for p in doc.paragraphs}
    assert styles["Top"] == "Heading 1"
    assert styles["Second"] == "Heading 2"
    assert styles["bullet one"] == "List Bullet"
    assert styles["numbered one"] == "List Number"

    plain = next(p for p in doc.paragraphs if p.text == "Plain bold text")
    assert [run.bold for run in plain.runs if run.text == "bold"] == [True]


def test_export_report_docx(report, outputs):
    path = export_report_docx(report)
    assert Path(path).name == "Contract_Report_Riverside_Offices.docx"
    texts = [p.text for p in Document(path).paragraphs]
    assert "Contract Report: Riverside Offices" in texts
    assert "Clause 4.8" in texts
    assert "The Construction Act applies." in texts


def test_export_letter_docx(outputs):
    draft = DraftCommunication(
        to="The Contractor", subject="Late payment", greeting="Dear Sir/Madam,",
        body="Body.", closing="Yours faithfully,", sender="[NAME]",
    )
    path = export_letter_docx(draft, "Riverside")
    assert Path(path).name == "Draft_Communication_Riverside.docx"
    texts = [p.text for p in Document(path).paragraphs]
    assert "To: The Contractor" in texts
    assert "Subject: Late payment" in texts
    assert "Dear Sir/Madam," in texts


def test_generate_docx_failure_returns_empty(tmp_path, monkeypatch):
    blocker = tmp_path / "outputs"
    blocker.write_text("not a folder")
    monkeypatch.setattr("core.export.OUTPUTS_FOLDER", blocker)
    assert generate_docx("# x", "x.docx") == ""
