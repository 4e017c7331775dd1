"""
Unit tests for the deterministic analysis templates.

- Ordered keyword classification
- Clause catalogue and recommendation selection by family / role group
- Rendered prose: determinism, alignment, category content
"""

from __future__ import annotations

import pytest

from core.templates import (
    GENERAL_RECOMMENDATIONS,
    GENERIC_CLAUSES,
    IssueCategory,
    RECOMMENDATIONS,
    build_template_analysis,
    classify_issue,
    render_analysis,
    render_detailed_analysis,
    render_legal_context,
    render_recommendations,
    render_relevant_clauses,
    render_timeline_suggestions,
)
from models.schemas import ContractType, Issue, OrganizationRole, ProjectDetails, RoleGroup


# =============================================================================
# Classification
# =============================================================================

@pytest.mark.parametrize("description, expected", [
    ("Payment has not been certified on time", IssueCategory.PAYMENT),
    ("Payment delayed because of a delay to the works", IssueCategory.PAYMENT),
    ("The delay was caused by late access", IssueCategory.DELAY),
    ("Extra work instructed verbally", IssueCategory.VARIATION),
    ("The client wants to change the layout", IssueCategory.VARIATION),
    ("Poor workmanship in the brickwork", IssueCategory.DEFECT),
    ("Drawing errors in the steel frame", IssueCategory.DESIGN),
    ("Termination notice received", IssueCategory.GENERAL),
    ("Client withdrawing from the project", IssueCategory.GENERAL),
    ("Rates unchanged after an exchange of letters", IssueCategory.GENERAL),
    ("Revised drawings issued late", IssueCategory.DESIGN),
    ("Defective render on the east elevation", IssueCategory.DEFECT),
    ("Completion delayed by the utility company", IssueCategory.DELAY),
    ("", IssueCategory.GENERAL),
])
def test_classify_issue(description, expected):
    assert classify_issue(description) == expected


# =============================================================================
# Clauses
# =============================================================================

def test_jct_payment_clauses():
    clauses = render_relevant_clauses(ContractType.JCT_STANDARD_BUILDING, "Payment is late")
    assert clauses == ["Clause 4.8", "Clause 4.9", "Clause 4.10", "Clause 4.11", "Clause 4.12", "Clause 4.13"]


def test_nec_delay_clauses():
    clauses = render_relevant_clauses(ContractType.NEC4_ECC, "Delay from late drawings")
    assert "Clause 61.3" in clauses


def test_fidic_variation_clauses():
    clauses = render_relevant_clauses(ContractType.FIDIC_RED, "Variation not valued")
    assert clauses[0] == "Clause 13.1"


def test_unrecognised_family_uses_generic_clauses():
    assert render_relevant_clauses(ContractType.BESPOKE, "Payment is late") == list(GENERIC_CLAUSES)
    assert render_relevant_clauses(None, "Payment is late") == list(GENERIC_CLAUSES)


def test_contract_type_given_as_text():
    assert render_relevant_clauses("JCT Standard Building Contract", "payment")[0] == "Clause 4.8"
    assert render_relevant_clauses("Not a contract", "payment") == list(GENERIC_CLAUSES)


# =============================================================================
# Recommendations
# =============================================================================

def test_contractor_payment_recommendations():
    recs = render_recommendations(ContractType.JCT_STANDARD_BUILDING, OrganizationRole.MAIN_CONTRACTOR, "payment")
    assert len(recs) == 5
    assert recs[0].startswith("Submit a formal payment notice")


def test_subcontractor_shares_contractor_payment_recommendations():
    sub = render_recommendations(ContractType.JCT_STANDARD_BUILDING, OrganizationRole.DOMESTIC_SUBCONTRACTOR, "payment")
    main = render_recommendations(ContractType.JCT_STANDARD_BUILDING, OrganizationRole.MAIN_CONTRACTOR, "payment")
    assert sub == main


def test_client_payment_recommendations():
    recs = render_recommendations(ContractType.JCT_STANDARD_BUILDING, OrganizationRole.CLIENT_EMPLOYER, "payment")
    assert recs == list(RECOMMENDATIONS[(IssueCategory.PAYMENT, RoleGroup.CLIENT)])


def test_unmapped_role_uses_other_recommendations():
    recs = render_recommendations(ContractType.JCT_STANDARD_BUILDING, OrganizationRole.QUANTITY_SURVEYOR, "payment")
    assert recs == list(RECOMMENDATIONS[(IssueCategory.PAYMENT, RoleGroup.OTHER)])


def test_general_issue_recommendations():
    recs = render_recommendations(ContractType.NEC4_ECC, OrganizationRole.MAIN_CONTRACTOR, "Termination notice")
    assert recs == list(GENERAL_RECOMMENDATIONS)


def test_contractor_design_recommendations_depend_on_form():
    design_and_build = render_recommendations(
        ContractType.JCT_DESIGN_AND_BUILD, OrganizationRole.MAIN_CONTRACTOR, "design error"
    )
    traditional = render_recommendations(
        ContractType.JCT_STANDARD_BUILDING, OrganizationRole.MAIN_CONTRACTOR, "design error"
    )
    assert design_and_build == list(RECOMMENDATIONS[(IssueCategory.DESIGN, RoleGroup.CONTRACTOR)])
    assert traditional == list(RECOMMENDATIONS[(IssueCategory.DESIGN, RoleGroup.OTHER)])


# =============================================================================
# Prose
# =============================================================================

def test_render_analysis_is_deterministic():
    args = ("Payment has not been certified on time", ContractType.JCT_STANDARD_BUILDING, OrganizationRole.MAIN_CONTRACTOR)
    first = render_analysis(*args)
    second = render_analysis(*args)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_clause_explanations_align_with_clauses():
    description = "Delay caused by exceptionally adverse weather"
    for contract in (ContractType.JCT_STANDARD_BUILDING, ContractType.NEC4_ECC, ContractType.FIDIC_RED, ContractType.BESPOKE):
        clauses = render_relevant_clauses(contract, description)
        explanations = render_analysis(description, contract, OrganizationRole.MAIN_CONTRACTOR).clause_explanations
        assert len(explanations) == len(clauses)
        for clause, explanation in zip(clauses, explanations):
            assert explanation.startswith(clause)


def test_detailed_analysis_branches_on_sub_keyword():
    text = render_detailed_analysis(
        "Payment of retention monies withheld", ContractType.JCT_STANDARD_BUILDING, OrganizationRole.MAIN_CONTRACTOR,
    )
    assert "retention monies" in text
    assert "clauses 4.8-4.13" in text
    assert "As a Main Contractor" in text


def test_legal_context_by_category():
    payment = render_legal_context(ContractType.JCT_STANDARD_BUILDING, "payment overdue")
    defect = render_legal_context(ContractType.JCT_STANDARD_BUILDING, "defect in roof")
    assert "Late Payment of Commercial Debts" in payment
    assert "Grove Developments" in payment
    assert "Defective Premises Act 1972" in defect
    assert "Construction Act" in defect


@pytest.mark.parametrize("description, days", [
    ("payment overdue", 7),
    ("delay to completion", 14),
    ("termination", 14),
])
def test_timeline_states_response_window(description, days):
    assert f"within {days} days" in render_timeline_suggestions(description)


def test_build_template_analysis_jct_payment():
    project = ProjectDetails(
        project_name="Riverside",
        contract_type=ContractType.JCT_STANDARD_BUILDING,
        organization_role=OrganizationRole.MAIN_CONTRACTOR,
        issues=[Issue(description="Payment has not been certified on time", actions_taken="")],
    )
    analysis = build_template_analysis(project, project.issues[0])
    assert analysis.issue == "Payment has not been certified on time"
    assert "Clause 4.8" in analysis.relevant_clauses
    assert analysis.recommendations
    assert analysis.detailed_analysis
    assert analysis.legal_context
    assert analysis.potential_outcomes
    assert analysis.timeline_suggestions
    assert analysis.risk_assessment
