"""
Unit tests for draft letter assembly and parsing.

Covers recipient and salutation rules, request phrasing, reference
numbers, the deterministic template letter and tolerant parsing of
model-drafted letters.
"""

from __future__ import annotations

import random
import re
from datetime import date, datetime

import pytest

from core.letters import (
    assemble_letter,
    format_letter_date,
    make_reference_number,
    parse_letter_response,
    recipient_for_role,
    salutation_for,
    to_request_phrasing,
)
from models.schemas import Analysis, ContractType, Issue, OrganizationRole, ProjectDetails, Report

TODAY = date(2025, 3, 7)


def _report(role=OrganizationRole.MAIN_CONTRACTOR, analyses=None) -> Report:
    analyses = analyses if analyses is not None else [
        Analysis(
            issue="Payment late",
            actions_taken="Chased by email.",
            detailed_analysis="The employer failed to pay. Further discussion follows.",
            relevant_clauses=["Clause 4.8", "Clause 4.9"],
            recommendations=["Submit a payment notice.", "Keep records.", "Not included."],
            timeline_suggestions="Seek a substantive written response within 7 days of your formal notice.",
        )
    ]
    return Report(
        id="1700000000000",
        date=datetime(2025, 3, 7, 10, 0),
        project_details=ProjectDetails(
            project_name="Riverside",
            contract_type=ContractType.JCT_STANDARD_BUILDING,
            organization_role=role,
            issues=[Issue(description=a.issue, actions_taken=a.actions_taken) for a in analyses],
        ),
        analysis=analyses,
    )


# =============================================================================
# Recipient and salutation
# =============================================================================

@pytest.mark.parametrize("role, expected", [
    (OrganizationRole.MAIN_CONTRACTOR, "The Employer/Client"),
    (OrganizationRole.CLIENT_EMPLOYER, "The Contractor"),
    (OrganizationRole.DOMESTIC_SUBCONTRACTOR, "The Main Contractor"),
    (OrganizationRole.CONTRACT_ADMINISTRATOR, "The Relevant Party"),
    (OrganizationRole.ARCHITECT, "The Relevant Party"),
    (OrganizationRole.QUANTITY_SURVEYOR, "The Contract Administrator"),
    (None, "The Contract Administrator"),
    ("Main Contractor", "The Employer/Client"),
    ("Astronaut", "The Contract Administrator"),
])
def test_recipient_for_role(role, expected):
    assert recipient_for_role(role) == expected


def test_salutation():
    assert salutation_for("The Contract Administrator") == "Dear The Contract Administrator,"
    assert salutation_for("The Architect") == "Dear The Architect,"
    assert salutation_for("The Employer/Client") == "Dear Sir/Madam,"


# =============================================================================
# Phrasing
# =============================================================================

@pytest.mark.parametrize("text, expected", [
    ("Submit a formal notice.", "please submit a formal notice."),
    ("Review the contractor's programme", "please review your programme"),
    ("You should respond promptly", "we ask that you respond promptly"),
    ("Liaise with the surveyor", "liaise with the surveyor"),
    ("", ""),
])
def test_to_request_phrasing(text, expected):
    assert to_request_phrasing(text) == expected


def test_letter_date_and_reference():
    assert format_letter_date(TODAY) == "7 March 2025"
    ref = make_reference_number("Riverside", random.Random(1), TODAY)
    assert re.fullmatch(r"REF: RIV/2025/\d{3}", ref)
    assert ref == make_reference_number("Riverside", random.Random(1), TODAY)


# =============================================================================
# Template letter
# =============================================================================

def test_assemble_letter_fields():
    draft = assemble_letter(_report(), rng=random.Random(3), today=TODAY)
    assert draft.to == "The Employer/Client"
    assert draft.greeting == "Dear Sir/Madam,"
    assert draft.subject == "Riverside - JCT Standard Building Contract - Contract Notice"
    assert draft.closing == "Yours faithfully,"
    assert draft.sender.startswith("[NAME]\n[POSITION]\n[COMPANY]\nREF: RIV/2025/")
    assert draft.sender.endswith("Date: 7 March 2025")


def test_assemble_letter_body():
    body = assemble_letter(_report(), rng=random.Random(3), today=TODAY).body
    assert body.startswith("Re: Riverside - JCT Standard Building Contract")
    assert "in my capacity as Main Contractor" in body
    assert "the following contractual matter that requires" in body
    assert "**Issue 1: Payment late**" in body
    assert "In accordance with Clause 4.8, Clause 4.9 of the contract" in body
    assert "we have already undertaken the following actions: Chased by email." in body
    assert "The employer failed to pay." in body
    assert "Further discussion follows" not in body
    assert "Accordingly, please submit a payment notice." in body
    assert "Additionally, please keep records." in body
    assert "Not included" not in body
    assert "we request your response within 7 days of receipt of this communication." in body
    assert "without prejudice" in body


def test_assemble_letter_one_block_per_issue():
    analyses = [Analysis(issue="First"), Analysis(issue="Second")]
    body = assemble_letter(_report(analyses=analyses), rng=random.Random(0), today=TODAY).body
    assert "**Issue 1: First**" in body
    assert "**Issue 2: Second**" in body
    assert "contractual matters that require" in body
    assert body.count("We request your prompt attention") == 2


def test_assemble_letter_is_deterministic_with_injected_sources():
    first = assemble_letter(_report(), rng=random.Random(9), today=TODAY)
    second = assemble_letter(_report(), rng=random.Random(9), today=TODAY)
    assert first == second


# =============================================================================
# Parsing
# =============================================================================

def test_parse_full_letter():
    text = (
        "To: The Employer/Client\n"
        "Subject: Late payment\n\n"
        "Dear Sir/Madam,\n\n"
        "We write regarding payment.\n\n"
        "Yours faithfully,\n"
        "Jane Smith\n"
        "Director"
    )
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.to == "The Employer/Client"
    assert draft.subject == "Late payment"
    assert draft.greeting == "Dear Sir/Madam,"
    assert draft.body == "We write regarding payment."
    assert draft.closing == "Yours faithfully,"
    assert draft.sender == "Jane Smith\nDirector"


def test_parse_kind_regards_and_default_headers():
    text = "Dear Bob,\nBody here.\nKind regards,\nBob"
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.to == "The Employer/Client"
    assert draft.subject == "Riverside - JCT Standard Building Contract - Contract Notice"
    assert draft.greeting == "Dear Bob,"
    assert draft.body == "Body here."
    assert draft.closing == "Kind regards,"
    assert draft.sender == "Bob"


def test_parse_unstructured_text_falls_back():
    draft = parse_letter_response("lorem ipsum", _report(), rng=random.Random(0), today=TODAY)
    assert draft.greeting == "Dear Sir/Madam,"
    assert draft.body == "lorem ipsum"
    assert draft.closing == "Yours faithfully,"
    assert draft.sender.startswith("[NAME]")


def test_parse_empty_text():
    draft = parse_letter_response("", _report(), rng=random.Random(0), today=TODAY)
    assert draft.body == ""
    assert draft.closing == "Yours faithfully,"
    assert draft.to == "The Employer/Client"


def test_parse_headers_without_salutation():
    text = "To: The Employer\nSubject: Late payment\nWe write about X.\nKind Regards,\nBob"
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.to == "The Employer"
    assert draft.subject == "Late payment"
    assert draft.greeting == "Dear Sir/Madam,"
    assert draft.body == "We write about X."
    assert draft.closing == "Kind Regards,"
    assert draft.sender == "Bob"


def test_parse_missing_salutation_uses_recipient_title():
    text = "To: The Contract Administrator\n\nPlease certify the works."
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.greeting == "Dear The Contract Administrator,"
    assert draft.body == "Please certify the works."
    assert draft.subject == "Riverside - JCT Standard Building Contract - Contract Notice"


def test_parse_bold_headers_and_re_line():
    text = (
        "**To:** The Contractor\n\n"
        "Dear Sir/Madam,\n\n"
        "Re: Defective render\n\n"
        "The render has failed.\n\n"
        "Yours sincerely,\n"
        "A. Client"
    )
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.to == "The Contractor"
    assert draft.subject == "Defective render"
    assert draft.body == "The render has failed."
    assert draft.closing == "Yours sincerely,"


def test_closing_words_inside_the_body_are_not_a_closing():
    text = "Dear Sir/Madam,\nRegards the payment, nothing has arrived.\nYours faithfully,\nBob"
    draft = parse_letter_response(text, _report(), rng=random.Random(0), today=TODAY)
    assert draft.body == "Regards the payment, nothing has arrived."
    assert draft.closing == "Yours faithfully,"
