"""
Pydantic models for Contract Advisor.

Every data boundary (project form, generated analysis, stored reports,
LLM output, draft letters) flows through these models. Field names are
snake_case in Python and camelCase on the wire, so saved JSON keeps the
shape the browser client and the reports table have always used.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base model: camelCase aliases on the wire, field names accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Catalogues
# =============================================================================

class ContractType(str, Enum):
    # JCT
    JCT_STANDARD_BUILDING = "JCT Standard Building Contract"
    JCT_DESIGN_AND_BUILD = "JCT Design and Build Contract"
    JCT_MINOR_WORKS = "JCT Minor Works Contract"
    JCT_INTERMEDIATE_BUILDING = "JCT Intermediate Building Contract"
    JCT_CONSTRUCTION_MANAGEMENT = "JCT Construction Management Contract"
    JCT_MANAGEMENT_BUILDING = "JCT Management Building Contract"
    JCT_MEASURED_TERM = "JCT Measured Term Contract"
    JCT_PRIME_COST_BUILDING = "JCT Prime Cost Building Contract"
    JCT_REPAIR_AND_MAINTENANCE = "JCT Repair and Maintenance Contract"
    JCT_MINOR_WORKS_BUILDING = "JCT Minor Works Building Contract"
    # NEC
    NEC3_ECC = "NEC3 Engineering and Construction Contract (ECC)"
    NEC4_ECC = "NEC4 Engineering and Construction Contract (ECC)"
    NEC3_ECSC = "NEC3 Engineering and Construction Short Contract (ECSC)"
    NEC4_ECSC = "NEC4 Engineering and Construction Short Contract (ECSC)"
    NEC3_PSC = "NEC3 Professional Services Contract (PSC)"
    NEC4_PSC = "NEC4 Professional Services Contract (PSC)"
    NEC3_TSC = "NEC3 Term Service Contract (TSC)"
    NEC4_TSC = "NEC4 Term Service Contract (TSC)"
    NEC3_SC = "NEC3 Supply Contract (SC)"
    NEC4_SC = "NEC4 Supply Contract (SC)"
    NEC3_FC = "NEC3 Framework Contract (FC)"
    NEC4_FC = "NEC4 Framework Contract (FC)"
    # RIBA
    RIBA_STANDARD = "RIBA Standard Agreement"
    RIBA_CONCISE = "RIBA Concise Agreement"
    RIBA_DOMESTIC_BUILDING = "RIBA Domestic Building Contract"
    RIBA_HOME_OWNER = "RIBA Building Contract for a Home Owner/Occupier"
    # ICE
    ICE_CONDITIONS = "ICE Conditions of Contract"
    ICE_DESIGN_AND_CONSTRUCT = "ICE Design and Construct Contract"
    ICE_MINOR_WORKS = "ICE Minor Works Contract"
    # FIDIC
    FIDIC_RED = "FIDIC Red Book (Construction)"
    FIDIC_YELLOW = "FIDIC Yellow Book (Plant & Design-Build)"
    FIDIC_SILVER = "FIDIC Silver Book (EPC/Turnkey)"
    FIDIC_GREEN = "FIDIC Green Book (Short Form)"
    FIDIC_GOLD = "FIDIC Gold Book (Design, Build and Operate)"
    FIDIC_BLUE = "FIDIC Blue Book (Dredging and Reclamation)"
    FIDIC_WHITE = "FIDIC White Book (Client/Consultant Model Services Agreement)"
    # Other standard forms
    ACA_BUILDING_AGREEMENT = "ACA Form of Building Agreement"
    GC_WORKS = "GC/Works Contracts"
    PPC2000 = "PPC2000 Contract"
    ICHEME = "IChemE Forms of Contract"
    ACE_AGREEMENTS = "ACE Agreements"
    CIC_CONSULTANT = "CIC Consultant Contract"
    # Specialist / others
    BESPOKE = "Bespoke Contract"
    LETTER_OF_INTENT = "Letter of Intent"
    FRAMEWORK_AGREEMENT = "Framework Agreement"
    TERM_CONTRACT = "Term Contract"
    OTHER = "Other"


class ContractFamily(str, Enum):
    JCT = "JCT"
    NEC = "NEC"
    FIDIC = "FIDIC"
    OTHER = "OTHER"


class OrganizationRole(str, Enum):
    # Client roles
    CLIENT_EMPLOYER = "Client/Employer"
    CLIENT_REPRESENTATIVE = "Client Representative"
    PROJECT_SPONSOR = "Project Sponsor"
    # Professional roles
    ARCHITECT = "Architect"
    CONTRACT_ADMINISTRATOR = "Contract Administrator"
    PROJECT_MANAGER = "Project Manager"
    QUANTITY_SURVEYOR = "Quantity Surveyor"
    ENGINEER = "Engineer"
    PRINCIPAL_DESIGNER = "Principal Designer"
    CDM_COORDINATOR = "CDM Coordinator"
    EMPLOYERS_AGENT = "Employer's Agent"
    # Contractor roles
    MAIN_CONTRACTOR = "Main Contractor"
    DESIGN_AND_BUILD_CONTRACTOR = "Design and Build Contractor"
    PRINCIPAL_CONTRACTOR = "Principal Contractor"
    CONSTRUCTION_MANAGER = "Construction Manager"
    MANAGEMENT_CONTRACTOR = "Management Contractor"
    # Sub-contractor roles
    DOMESTIC_SUBCONTRACTOR = "Domestic Sub-contractor"
    NOMINATED_SUBCONTRACTOR = "Nominated Sub-contractor"
    NAMED_SUBCONTRACTOR = "Named Sub-contractor"
    SPECIALIST_SUBCONTRACTOR = "Specialist Sub-contractor"
    # Suppliers
    MATERIAL_SUPPLIER = "Material/Equipment Supplier"
    SPECIALIST_SUPPLIER = "Specialist Supplier"
    # Other roles
    CONSULTANT = "Consultant"
    LEGAL_ADVISOR = "Legal Advisor"
    OTHER = "Other"


class RoleGroup(str, Enum):
    CLIENT = "CLIENT"
    CONTRACTOR = "CONTRACTOR"
    SUBCONTRACTOR = "SUBCONTRACTOR"
    ADMINISTRATOR = "ADMINISTRATOR"
    OTHER = "OTHER"


def _family_of(contract_type: ContractType) -> ContractFamily:
    for family in (ContractFamily.JCT, ContractFamily.NEC, ContractFamily.FIDIC):
        if contract_type.name.startswith(family.value):
            return family
    return ContractFamily.OTHER


CONTRACT_FAMILIES: dict[ContractType, ContractFamily] = {
    ct: _family_of(ct) for ct in ContractType
}

# Forms where the contractor carries design responsibility by default
DESIGN_AND_BUILD_FORMS = frozenset({
    ContractType.JCT_DESIGN_AND_BUILD,
    ContractType.ICE_DESIGN_AND_CONSTRUCT,
    ContractType.FIDIC_YELLOW,
    ContractType.FIDIC_SILVER,
    ContractType.FIDIC_GOLD,
})

ROLE_GROUPS: dict[OrganizationRole, RoleGroup] = {
    OrganizationRole.CLIENT_EMPLOYER: RoleGroup.CLIENT,
    OrganizationRole.CLIENT_REPRESENTATIVE: RoleGroup.CLIENT,
    OrganizationRole.EMPLOYERS_AGENT: RoleGroup.CLIENT,
    OrganizationRole.MAIN_CONTRACTOR: RoleGroup.CONTRACTOR,
    OrganizationRole.DESIGN_AND_BUILD_CONTRACTOR: RoleGroup.CONTRACTOR,
    OrganizationRole.PRINCIPAL_CONTRACTOR: RoleGroup.CONTRACTOR,
    OrganizationRole.MANAGEMENT_CONTRACTOR: RoleGroup.CONTRACTOR,
    OrganizationRole.DOMESTIC_SUBCONTRACTOR: RoleGroup.SUBCONTRACTOR,
    OrganizationRole.NOMINATED_SUBCONTRACTOR: RoleGroup.SUBCONTRACTOR,
    OrganizationRole.NAMED_SUBCONTRACTOR: RoleGroup.SUBCONTRACTOR,
    OrganizationRole.SPECIALIST_SUBCONTRACTOR: RoleGroup.SUBCONTRACTOR,
    OrganizationRole.CONTRACT_ADMINISTRATOR: RoleGroup.ADMINISTRATOR,
    OrganizationRole.ARCHITECT: RoleGroup.ADMINISTRATOR,
    OrganizationRole.ENGINEER: RoleGroup.ADMINISTRATOR,
}


def contract_family(contract_type: ContractType) -> ContractFamily:
    return CONTRACT_FAMILIES.get(contract_type, ContractFamily.OTHER)


def role_group(role: OrganizationRole) -> RoleGroup:
    return ROLE_GROUPS.get(role, RoleGroup.OTHER)


# =============================================================================
# Project input
# =============================================================================

class Issue(_WireModel):
    """One contractual issue as described by the user."""
    description: str = ""
    actions_taken: str = ""


class ProjectDetails(_WireModel):
    """Project form contents. Frozen into a Report at generation time."""
    project_name: str = ""
    project_description: str = ""
    contract_type: ContractType | None = None
    organization_role: OrganizationRole | None = None
    issues: list[Issue] = Field(default_factory=lambda: [Issue()])


# =============================================================================
# Analysis output
# =============================================================================

class Analysis(_WireModel):
    """Structured analysis for one issue. Empty text is a valid degraded state."""
    issue: str = ""
    actions_taken: str = ""
    detailed_analysis: str = ""
    legal_context: str = ""
    relevant_clauses: list[str] = Field(default_factory=list)
    clause_explanations: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    potential_outcomes: str = ""
    timeline_suggestions: str = ""
    risk_assessment: str = ""


class Report(_WireModel):
    """Project snapshot plus per-issue analysis, index-aligned with the issues."""
    id: str
    date: datetime = Field(default_factory=datetime.now)
    project_details: ProjectDetails
    analysis: list[Analysis] = Field(default_factory=list)

    @property
    def is_aligned(self) -> bool:
        return len(self.analysis) == len(self.project_details.issues)


class DraftCommunication(_WireModel):
    """A formal letter derived from a Report."""
    to: str = ""
    subject: str = ""
    greeting: str = ""
    body: str = ""
    closing: str = ""
    sender: str = ""


class StoredReport(_WireModel):
    """A Report as persisted for one owner."""
    id: str
    owner_id: str
    date: datetime
    created_at: datetime = Field(default_factory=datetime.now)
    project_details: ProjectDetails
    analysis: list[Analysis] = Field(default_factory=list)

    def to_report(self) -> Report:
        return Report(
            id=self.id,
            date=self.date,
            project_details=self.project_details,
            analysis=self.analysis,
        )


# =============================================================================
# LLM
# =============================================================================

class LLMCallResult(BaseModel):
    """Result from an LLM call with metadata."""
    text: str
    model: str
    tokens_in: int = 0
    tokens_out: int = 0
    duration_ms: int = 0
    agent_name: str = "LLM"
    success: bool = True
    error: str | None = None
