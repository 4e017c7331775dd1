"""
Unit tests for the data models: wire aliases, catalogues, alignment.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from models.schemas import (
    Analysis,
    ContractFamily,
    ContractType,
    Issue,
    OrganizationRole,
    ProjectDetails,
    Report,
    RoleGroup,
    StoredReport,
    contract_family,
    role_group,
)


def test_project_accepts_wire_and_field_names():
    wire = ProjectDetails.model_validate({
        "projectName": "Riverside",
        "contractType": "NEC4 Engineering and Construction Contract (ECC)",
        "organizationRole": "Main Contractor",
        "issues": [{"description": "Late payment", "actionsTaken": "Chased"}],
    })
    python = ProjectDetails(
        project_name="Riverside",
        contract_type=ContractType.NEC4_ECC,
        organization_role=OrganizationRole.MAIN_CONTRACTOR,
        issues=[Issue(description="Late payment", actions_taken="Chased")],
    )
    assert wire == python


def test_to_wire_uses_camel_case_and_enum_values():
    report = Report(
        id="1",
        date=datetime(2025, 3, 7, 9, 30),
        project_details=ProjectDetails(project_name="X", contract_type=ContractType.FIDIC_RED),
        analysis=[Analysis(issue="a", relevant_clauses=["Clause 14.7"])],
    )
    wire = report.to_wire()
    assert wire["projectDetails"]["contractType"] == "FIDIC Red Book (Construction)"
    assert wire["projectDetails"]["organizationRole"] is None
    assert wire["analysis"][0]["relevantClauses"] == ["Clause 14.7"]
    assert wire["date"] == "2025-03-07T09:30:00"


def test_new_project_has_one_blank_issue():
    assert ProjectDetails().issues == [Issue(description="", actions_taken="")]


@pytest.mark.parametrize("contract, family", [
    (ContractType.JCT_MINOR_WORKS, ContractFamily.JCT),
    (ContractType.NEC3_ECC, ContractFamily.NEC),
    (ContractType.FIDIC_SILVER, ContractFamily.FIDIC),
    (ContractType.RIBA_STANDARD, ContractFamily.OTHER),
    (ContractType.BESPOKE, ContractFamily.OTHER),
    (ContractType.OTHER, ContractFamily.OTHER),
])
def test_contract_family(contract, family):
    assert contract_family(contract) == family


@pytest.mark.parametrize("role, group", [
    (OrganizationRole.CLIENT_EMPLOYER, RoleGroup.CLIENT),
    (OrganizationRole.MAIN_CONTRACTOR, RoleGroup.CONTRACTOR),
    (OrganizationRole.NAMED_SUBCONTRACTOR, RoleGroup.SUBCONTRACTOR),
    (OrganizationRole.ENGINEER, RoleGroup.ADMINISTRATOR),
    (OrganizationRole.LEGAL_ADVISOR, RoleGroup.OTHER),
])
def test_role_group(role, group):
    assert role_group(role) == group


def test_every_contract_type_has_a_family():
    for contract in ContractType:
        assert isinstance(contract_family(contract), ContractFamily)


def test_report_alignment():
    project = ProjectDetails(issues=[Issue(description="a"), Issue(description="b")])
    report = Report(id="1", project_details=project, analysis=[Analysis(issue="a")])
    assert not report.is_aligned
    report.analysis.append(Analysis(issue="b"))
    assert report.is_aligned


def test_stored_report_to_report():
    stored = StoredReport(
        id="7",
        owner_id="user-a",
        date=datetime(2025, 1, 1),
        project_details=ProjectDetails(project_name="P"),
    )
    report = stored.to_report()
    assert report.id == "7"
    assert report.project_details.project_name == "P"
    assert not hasattr(report, "owner_id")
