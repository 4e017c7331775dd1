"""Pydantic models for type-safe data flow."""
from .schemas import (
    # Catalogues
    ContractType,
    ContractFamily,
    OrganizationRole,
    RoleGroup,
    CONTRACT_FAMILIES,
    ROLE_GROUPS,
    contract_family,
    role_group,
    # Project input
    Issue,
    ProjectDetails,
    # Output
    Analysis,
    Report,
    DraftCommunication,
    StoredReport,
    # LLM
    LLMCallResult,
)

__all__ = [
    "ContractType",
    "ContractFamily",
    "OrganizationRole",
    "RoleGroup",
    "CONTRACT_FAMILIES",
    "ROLE_GROUPS",
    "contract_family",
    "role_group",
    "Issue",
    "ProjectDetails",
    "Analysis",
    "Report",
    "DraftCommunication",
    "StoredReport",
    "LLMCallResult",
]
